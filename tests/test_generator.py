"""Test quiz question generation"""

import random
from collections import Counter

import pytest

from tunequiz.core.exceptions import InsufficientContentError
from tunequiz.quiz.generator import QuestionGenerator, stride_indices
from tunequiz.quiz.models import QuizQuestion


def assert_valid_question(question: QuizQuestion) -> None:
    assert len(question.choices) == 4
    assert question.choices.count(question.title) == 1
    assert question.correct_answer_index != -1
    assert question.choices[question.correct_answer_index] == question.title


class TestGenerate:
    """Test QuestionGenerator.generate()"""

    def test_six_tracks_three_artists(self, make_tracks, rng):
        """Test 5 questions from 6 tracks by 3 artists"""
        tracks = make_tracks(6, artists=3)

        questions = QuestionGenerator(rng).generate(tracks, 5)

        assert len(questions) == 5
        for question in questions:
            assert_valid_question(question)
            assert len(set(question.choices)) == 4

    def test_insufficient_content(self, make_tracks, rng):
        """Test 3 tracks cannot make 5 questions"""
        with pytest.raises(InsufficientContentError) as exc_info:
            QuestionGenerator(rng).generate(make_tracks(3), 5)

        assert exc_info.value.available == 3
        assert exc_info.value.requested == 5

    @pytest.mark.parametrize("count", [0, -1])
    def test_invalid_count(self, make_tracks, rng, count):
        """Test counts below 1"""
        with pytest.raises(ValueError):
            QuestionGenerator(rng).generate(make_tracks(3), count)

    def test_choice_invariants(self, make_tracks):
        """Test every question over many pools and seeds"""
        for seed in range(30):
            rng = random.Random(seed)
            pool_size = rng.randint(4, 25)
            tracks = make_tracks(pool_size, artists=rng.randint(1, pool_size))
            count = rng.randint(1, pool_size)

            for question in QuestionGenerator(rng).generate(tracks, count):
                assert_valid_question(question)
                assert len(set(question.choices)) == 4

    def test_selected_tracks_are_distinct(self, make_tracks, rng):
        """Test stride sampling never picks a track twice"""
        questions = QuestionGenerator(rng).generate(make_tracks(17), 5)
        assert len({q.track_id for q in questions}) == 5

    def test_fair_coverage(self, make_tracks):
        """Test every track is picked about equally often"""
        tracks = make_tracks(20)
        generator = QuestionGenerator(random.Random(42))
        picks = Counter()

        for _ in range(2000):
            picks.update(q.track_id for q in generator.generate(tracks, 5))

        assert set(picks) == {t.id for t in tracks}
        # Expected 500 each; 400-600 is more than five standard deviations
        assert all(400 <= n <= 600 for n in picks.values())

    def test_question_copies_track_fields(self, make_track, rng):
        """Test track data carried into the question"""
        track = make_track(track_id="abc", title="Dynamite", artist="BTS", start=40, end=70)

        question = QuestionGenerator(rng).generate([track], 1)[0]

        assert question.track_id == "abc"
        assert question.artist == "BTS"
        assert question.playback_window == track.playback_window
        assert question.thumbnail_url == track.thumbnail_url

    def test_input_not_modified(self, make_tracks, rng):
        """Test the caller's pool keeps its order"""
        tracks = make_tracks(10)
        original = list(tracks)
        QuestionGenerator(rng).generate(tracks, 5)
        assert tracks == original

    def test_seeded_generators_agree(self, make_tracks):
        """Test reproducibility with equal seeds"""
        tracks = make_tracks(12, artists=4)
        first = QuestionGenerator(random.Random(7)).generate(tracks, 6)
        second = QuestionGenerator(random.Random(7)).generate(tracks, 6)
        assert first == second


class TestDistractors:
    """Test distractor selection"""

    def test_other_artists_preferred(self, make_track, rng):
        """Test distractors come from other artists when possible"""
        tracks = [
            make_track("a1", "A One", "Artist A"),
            make_track("a2", "A Two", "Artist A"),
            make_track("a3", "A Three", "Artist A"),
            make_track("b1", "B One", "Artist B"),
            make_track("c1", "C One", "Artist C"),
            make_track("d1", "D One", "Artist D"),
        ]

        questions = QuestionGenerator(rng).generate(tracks, 6)

        for question in questions:
            if question.artist == "Artist A":
                assert set(question.choices) - {question.title} == {"B One", "C One", "D One"}

    def test_artist_comparison_ignores_case(self, make_track, rng):
        """Test 'IU' and 'iu' are one artist"""
        tracks = [
            make_track("s1", "Song One", "IU"),
            make_track("s2", "Song Two", "iu"),
            make_track("b1", "B One", "Artist B"),
            make_track("c1", "C One", "Artist C"),
            make_track("d1", "D One", "Artist D"),
        ]

        questions = QuestionGenerator(rng).generate(tracks, 5)

        for question in questions:
            if question.track_id == "s1":
                assert "Song Two" not in question.choices

    def test_fill_from_same_artist(self, make_track, rng):
        """Test same-artist titles fill in when other artists run out"""
        tracks = [make_track(f"v{i}", f"Song {i}", "Solo Artist") for i in range(4)]

        for question in QuestionGenerator(rng).generate(tracks, 4):
            assert_valid_question(question)
            assert not any(c.startswith("Option ") for c in question.choices)

    def test_placeholders_for_tiny_pool(self, make_tracks, rng):
        """Test 'Option N' placeholders when the pool is too small"""
        questions = QuestionGenerator(rng).generate(make_tracks(2), 2)

        for question in questions:
            assert_valid_question(question)
            assert len(set(question.choices)) == 4
            assert "Option 1" in question.choices
            assert "Option 2" in question.choices

    def test_placeholder_never_duplicates_title(self, make_track, rng):
        """Test a track titled like a placeholder"""
        question = QuestionGenerator(rng).generate([make_track(title="Option 1")], 1)[0]

        assert_valid_question(question)
        assert sorted(question.choices) == ["Option 1", "Option 2", "Option 3", "Option 4"]

    def test_duplicate_titles_in_pool(self, make_track, rng):
        """Test two tracks sharing a title never produce a duplicate choice"""
        tracks = [
            make_track("x1", "Love", "Artist A"),
            make_track("x2", "Love", "Artist B"),
            make_track("x3", "Hate", "Artist C"),
            make_track("x4", "Fear", "Artist D"),
            make_track("x5", "Hope", "Artist E"),
        ]

        for question in QuestionGenerator(rng).generate(tracks, 5):
            assert_valid_question(question)
            assert len(set(question.choices)) == 4


class TestStrideIndices:
    """Test stride_indices()"""

    def test_even_spread(self):
        """Test indices are spaced by pool_size // count"""
        assert stride_indices(20, 5, 2) == [2, 6, 10, 14, 18]

    def test_step_at_least_one(self):
        """Test pools equal to the count"""
        assert stride_indices(3, 3, 0) == [0, 1, 2]


class TestQuizQuestion:
    """Test QuizQuestion validation"""

    def test_rejects_wrong_choice_count(self, make_track):
        """Test three choices are rejected"""
        track = make_track()
        with pytest.raises(ValueError):
            QuizQuestion(
                track_id=track.id,
                title=track.title,
                artist=track.artist,
                playback_window=track.playback_window,
                choices=("Test Song", "B", "C"),
                correct_answer_index=0,
            )

    def test_to_dict(self, make_track):
        """Test the serialized shape"""
        track = make_track()
        question = QuizQuestion(
            track_id=track.id,
            title=track.title,
            artist=track.artist,
            playback_window=track.playback_window,
            choices=("A", "Test Song", "B", "C"),
            correct_answer_index=1,
        )
        data = question.to_dict()
        assert data["choices"] == ["A", "Test Song", "B", "C"]
        assert data["correct_answer_index"] == 1
        assert data["playback_window"] == {"start": 30, "end": 60}

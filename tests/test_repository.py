"""
Tests for repository module.

Tests question lookup and statistics recording including:
- Lookup by ID
- Incremental statistics and persistence to the stats file
- Failure reporting and rollback
- Concurrent updates
"""

import json
import threading
import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from codejudge.exceptions import StatisticsUpdateError
from codejudge.models import Question, TestCase
from codejudge.repository import QuestionRepository


def _question(question_id="two-sum"):
    return Question(
        id=question_id, title="Two Sum", question_text="", category="Arrays", difficulty="Easy",
        test_cases=[TestCase("[2,7,11,15], 9", "[0,1]")],
    )


class TestLookup:
    """Test finding questions."""

    def test_find_by_id(self):
        repo = QuestionRepository([_question("a"), _question("b")])

        assert repo.find_by_id("a").id == "a"
        assert repo.find_by_id("missing") is None
        assert [q.id for q in repo.list_questions()] == ["a", "b"]

    def test_get_stats_unknown(self):
        assert QuestionRepository([]).get_stats("x") is None


class TestRecordGradingStats:
    """Test statistics updates."""

    def test_in_memory_update(self):
        repo = QuestionRepository([_question()])

        repo.record_grading_stats("two-sum", True, 100)
        stats = repo.record_grading_stats("two-sum", False, 300)

        assert stats.total_attempts == 2
        assert stats.correct_attempts == 1
        assert stats.average_time == pytest.approx(200.0)
        assert stats.success_rate == pytest.approx(50.0)

    def test_unknown_question_raises(self):
        repo = QuestionRepository([_question()])

        with pytest.raises(StatisticsUpdateError):
            repo.record_grading_stats("missing", True, 10)

    def test_persists_to_stats_file(self, tmp_path):
        stats_path = tmp_path / "data" / "stats.json"
        repo = QuestionRepository([_question()], stats_path)

        repo.record_grading_stats("two-sum", True, 40)

        data = json.loads(stats_path.read_text(encoding="utf-8"))
        assert data["two-sum"]["totalAttempts"] == 1
        assert data["two-sum"]["correctAttempts"] == 1
        assert data["two-sum"]["averageTime"] == 40

    def test_reloads_persisted_stats(self, tmp_path):
        stats_path = tmp_path / "stats.json"
        QuestionRepository([_question()], stats_path).record_grading_stats("two-sum", False, 90)

        reloaded = QuestionRepository([_question()], stats_path)

        assert reloaded.get_stats("two-sum").total_attempts == 1
        assert reloaded.get_stats("two-sum").average_time == 90

    def test_unreadable_stats_file_is_ignored(self, tmp_path):
        stats_path = tmp_path / "stats.json"
        stats_path.write_text("{not json", encoding="utf-8")

        repo = QuestionRepository([_question()], stats_path)

        assert repo.get_stats("two-sum").total_attempts == 0

    def test_write_failure_raises_and_rolls_back(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        repo = QuestionRepository([_question()], blocker / "stats.json")

        with pytest.raises(StatisticsUpdateError) as exc_info:
            repo.record_grading_stats("two-sum", True, 10)

        assert exc_info.value.question_id == "two-sum"
        assert repo.get_stats("two-sum").total_attempts == 0

    def test_concurrent_updates_are_not_lost(self):
        repo = QuestionRepository([_question()])

        def worker():
            for _ in range(50):
                repo.record_grading_stats("two-sum", True, 10)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stats = repo.get_stats("two-sum")
        assert stats.total_attempts == 200
        assert stats.correct_attempts == 200
        assert stats.average_time == pytest.approx(10.0)

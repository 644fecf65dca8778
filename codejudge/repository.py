"""
In-memory question store with persisted running statistics.

Questions come from a question bank and are read-only at runtime. Each
grading request updates its question's statistics through a single
locked read-modify-write, optionally persisted to a JSON stats file.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .exceptions import StatisticsUpdateError
from .models import Question, QuestionStats

logger = logging.getLogger(__name__)


class QuestionRepository:
    """Looks up questions by ID and records grading statistics."""

    def __init__(self, questions: Iterable[Question], stats_path: Optional[Path] = None):
        self._questions: Dict[str, Question] = {q.id: q for q in questions}
        self.stats_path = Path(stats_path) if stats_path else None
        self._lock = threading.Lock()

        if self.stats_path is not None and self.stats_path.exists():
            self._load_stats()

    def _load_stats(self) -> None:
        """Overlay persisted statistics onto the bank's questions."""
        try:
            data = json.loads(self.stats_path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable stats file %s: %s", self.stats_path, e)
            return

        for question_id, stats in data.items():
            question = self._questions.get(question_id)
            if question is not None:
                question.stats = QuestionStats.from_dict(stats)

    def _save_stats(self) -> None:
        data = {qid: q.stats.to_dict() for qid, q in self._questions.items()}
        self.stats_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.stats_path.with_suffix(self.stats_path.suffix + '.tmp')
        tmp_path.write_text(json.dumps(data, indent=2), encoding='utf-8')
        tmp_path.replace(self.stats_path)

    def find_by_id(self, question_id: str) -> Optional[Question]:
        return self._questions.get(question_id)

    def list_questions(self) -> List[Question]:
        return list(self._questions.values())

    def get_stats(self, question_id: str) -> Optional[QuestionStats]:
        question = self._questions.get(question_id)
        return question.stats if question else None

    def record_grading_stats(self, question_id: str, correct: bool, time_ms: int) -> QuestionStats:
        """
        Fold one graded attempt into a question's statistics.

        Raises:
            StatisticsUpdateError: question unknown or stats could not be saved
        """
        with self._lock:
            question = self._questions.get(question_id)
            if question is None:
                raise StatisticsUpdateError(question_id, "unknown question")

            previous = QuestionStats(**vars(question.stats))
            question.stats.record(correct, time_ms)

            if self.stats_path is not None:
                try:
                    self._save_stats()
                except OSError as e:
                    question.stats = previous
                    raise StatisticsUpdateError(question_id, str(e))

            return question.stats

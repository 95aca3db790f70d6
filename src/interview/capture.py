# src/interview/capture.py
"""
Captura de entrevista ao vivo: alterna entre gravar pergunta e resposta.

Estados:
  - ``awaiting-question``: pronto para gravar uma nova pergunta
  - ``question-recorded-awaiting-answer``: pergunta gravada, falta a resposta

O reconhecimento de fala acontece fora daqui; esta classe só aplica o texto
reconhecido. Uma falha de reconhecimento simplesmente não chama ``apply``,
então o estado fica como estava.
"""
import threading
from typing import Dict, List, Optional, Tuple

from ..data.schema import InterviewTurn

QUESTION = "question"
ANSWER = "answer"
MODES = (QUESTION, ANSWER)

AWAITING_QUESTION = "awaiting-question"
AWAITING_ANSWER = "question-recorded-awaiting-answer"


class CaptureError(Exception):
    pass


class InterviewCapture:
    def __init__(self, vacancy_id: str, candidate_id: str):
        self.vacancy_id = vacancy_id
        self.candidate_id = candidate_id
        self.turns: List[InterviewTurn] = []
        self.counter = 0
        self.question_recorded = False
        self.active = QUESTION
        # handlers da API rodam no thread pool; checagem + mutação sob o mesmo lock
        self._lock = threading.RLock()

    @property
    def state(self) -> str:
        return AWAITING_ANSWER if self.question_recorded else AWAITING_QUESTION

    def select(self, mode: str) -> None:
        if mode not in MODES:
            raise CaptureError(f"Modo inválido: {mode}")
        with self._lock:
            if mode == QUESTION and self.question_recorded:
                raise CaptureError("Ya hay una pregunta grabada; graba la respuesta primero.")
            if mode == ANSWER and not self.question_recorded:
                raise CaptureError("Primero graba una pregunta.")
            self.active = mode

    def check_can_record(self) -> None:
        with self._lock:
            if self.active == QUESTION and self.question_recorded:
                raise CaptureError("Ya hay una pregunta grabada; graba la respuesta primero.")
            if self.active == ANSWER and not (self.question_recorded and self.turns):
                raise CaptureError("No hay pregunta pendiente de respuesta.")

    def apply(self, text: str) -> InterviewTurn:
        """Aplica um resultado reconhecido e devolve o turno afetado."""
        with self._lock:
            self.check_can_record()
            if self.active == QUESTION:
                turn = InterviewTurn(id=self.counter, question=text, response="")
                self.turns.append(turn)
                self.question_recorded = True
                return turn

            last = self.turns[-1]
            last.response = text
            self.counter += 1
            self.question_recorded = False
            return last

    def reset(self) -> None:
        with self._lock:
            self.turns = []
            self.counter = 0
            self.question_recorded = False
            self.active = QUESTION

    def snapshot(self) -> Dict:
        with self._lock:
            return {
                "vacancy_id": self.vacancy_id,
                "candidate_id": self.candidate_id,
                "state": self.state,
                "active": self.active,
                "question_recorded": self.question_recorded,
                "counter": self.counter,
                "turns": [t.to_doc() for t in self.turns],
            }


class CaptureRegistry:
    """Sessões de captura abertas, uma por (vaga, candidato)."""

    def __init__(self):
        self._sessions: Dict[Tuple[str, str], InterviewCapture] = {}

    def open(self, vacancy_id: str, candidate_id: str) -> InterviewCapture:
        key = (vacancy_id, candidate_id)
        return self._sessions.setdefault(key, InterviewCapture(vacancy_id, candidate_id))

    def get(self, vacancy_id: str, candidate_id: str) -> Optional[InterviewCapture]:
        return self._sessions.get((vacancy_id, candidate_id))

    def close(self, vacancy_id: str, candidate_id: str) -> bool:
        return self._sessions.pop((vacancy_id, candidate_id), None) is not None

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

"""
Контекст выполнения для отслеживания запусков.

RunContext создаётся один раз на вызов CLI и прокидывается через слои:
CLI → CollectionService → TopologyCollector → InferenceEngine.

run_id автоматически попадает в каждую запись лога (см. core.logging).

Пример использования:
    ctx = RunContext.create(command="collect-all")
    set_current_context(ctx)
    service.collect_all()
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Literal

logger = logging.getLogger(__name__)

TriggerSource = Literal["cli", "cron", "api", "test"]


@dataclass
class RunContext:
    """
    Контекст выполнения операции.

    Attributes:
        run_id: Уникальный идентификатор запуска (timestamp или UUID)
        started_at: Время начала выполнения
        triggered_by: Источник запуска (cli/cron/api/test)
        command: Команда CLI которая была вызвана
        extra: Дополнительные данные контекста
    """

    run_id: str
    started_at: datetime
    triggered_by: TriggerSource = "cli"
    command: str = ""
    extra: dict = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        triggered_by: TriggerSource = "cli",
        command: str = "",
        use_timestamp_id: bool = True,
    ) -> "RunContext":
        """
        Создаёт новый контекст выполнения.

        Args:
            triggered_by: Источник запуска
            command: Название команды CLI
            use_timestamp_id: Использовать timestamp вместо UUID

        Returns:
            RunContext: Новый контекст
        """
        started_at = datetime.now()

        if use_timestamp_id:
            # Формат: 2025-03-14T12-30-22
            run_id = started_at.strftime("%Y-%m-%dT%H-%M-%S")
        else:
            run_id = str(uuid.uuid4())[:8]

        ctx = cls(
            run_id=run_id,
            started_at=started_at,
            triggered_by=triggered_by,
            command=command,
        )
        logger.debug(f"Created RunContext: {ctx.run_id} ({command or '-'})")
        return ctx

    @property
    def elapsed_seconds(self) -> float:
        """Время выполнения в секундах."""
        return (datetime.now() - self.started_at).total_seconds()

    @property
    def elapsed_human(self) -> str:
        """Время выполнения в человекочитаемом формате."""
        elapsed = self.elapsed_seconds
        if elapsed < 60:
            return f"{elapsed:.1f}s"
        minutes = int(elapsed // 60)
        seconds = int(elapsed % 60)
        return f"{minutes}m {seconds}s"

    def to_dict(self) -> dict:
        """Сериализация для логов."""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "triggered_by": self.triggered_by,
            "command": self.command,
        }


# Контекст текущего запуска (общий для всех потоков пула)
_current_context: Optional[RunContext] = None
_context_lock = threading.Lock()


def get_current_context() -> Optional[RunContext]:
    """Возвращает текущий контекст выполнения."""
    return _current_context


def set_current_context(ctx: Optional[RunContext]) -> None:
    """Устанавливает текущий контекст выполнения (None — сбросить)."""
    global _current_context
    with _context_lock:
        _current_context = ctx

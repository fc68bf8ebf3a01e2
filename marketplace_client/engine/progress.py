"""Progress Monitor - 작업량 분할 및 취소 관리

예산(작업량) 구조 예시 (user_favorites):
- 전체: 10000
- 즐겨찾기 참조 조회: 1000
- 참조별 Node 조회: 9000 (참조 하나당 균등 분배)

자식 모니터는 부모의 작업량 일부를 가중치로 받아 소비하며,
취소 플래그는 루트와 공유합니다.
"""

from dataclasses import dataclass
from typing import Optional

from marketplace_client.core.exceptions import CancelledException


@dataclass
class _CancellationFlag:
    """루트와 모든 자식이 공유하는 취소 상태"""

    cancelled: bool = False


class ProgressMonitor:
    """진행/취소 모니터

    Usage:
        monitor = ProgressMonitor(total_work=200, name="get_category")

        markets = list_markets(monitor.new_child(50))
        monitor.check_cancelled()
        category = fetch_category(monitor.new_child(150))

        report = monitor.get_report()
    """

    def __init__(
        self,
        total_work: int = 100,
        name: str = "",
        parent: Optional["ProgressMonitor"] = None,
        parent_weight: int = 0,
    ):
        if total_work < 0:
            raise ValueError(f"total_work must be >= 0: {total_work}")
        self.name = name
        self.total_work = total_work
        self._done = 0
        self._parent = parent
        self._parent_weight = parent_weight
        self._reported_to_parent = 0
        self._flag = parent._flag if parent is not None else _CancellationFlag()
        self._checkpoints: dict[str, int] = {}

    @classmethod
    def convert(cls, monitor: Optional["ProgressMonitor"], total_work: int = 100, name: str = "") -> "ProgressMonitor":
        """None이면 새 루트 모니터, 아니면 주어진 모니터의 전체 작업량을 받는 자식 반환"""
        if monitor is None:
            return cls(total_work=total_work, name=name)
        return monitor.new_child(monitor.remaining(), total_work=total_work, name=name or monitor.name)

    def new_child(self, weight: int, total_work: int = 100, name: str = "") -> "ProgressMonitor":
        """부모 작업량 중 `weight`만큼을 담당하는 자식 모니터 생성

        Args:
            weight: 부모에서 떼어줄 작업량
            total_work: 자식 내부 작업량
            name: 자식 이름 (리포트용)
        """
        weight = max(0, min(weight, self.remaining()))
        return ProgressMonitor(
            total_work=total_work,
            name=name or self.name,
            parent=self,
            parent_weight=weight,
        )

    def worked(self, work: int) -> None:
        """작업 진행 기록 (전체 작업량을 넘지 않음)"""
        if work <= 0:
            return
        self._done = min(self.total_work, self._done + work)
        self._propagate()

    def done(self) -> None:
        """남은 작업을 모두 완료 처리"""
        self.worked(self.remaining())

    def set_work_remaining(self, remaining: int) -> None:
        """남은 작업량 재설정 - 지금까지의 진행은 유지"""
        remaining = max(0, remaining)
        self.total_work = self._done + remaining

    def remaining(self) -> int:
        return max(0, self.total_work - self._done)

    def fraction_done(self) -> float:
        if self.total_work == 0:
            return 1.0
        return self._done / self.total_work

    def checkpoint(self, name: str) -> None:
        """체크포인트 기록 (이름별 완료 작업량)"""
        self._checkpoints[name] = self._done

    def cancel(self) -> None:
        """루트를 포함한 전체 트리를 취소 상태로 전환"""
        self._flag.cancelled = True

    def is_cancelled(self) -> bool:
        return self._flag.cancelled

    def check_cancelled(self, operation: Optional[str] = None) -> None:
        """취소되었으면 CancelledException

        Raises:
            CancelledException: 취소된 경우
        """
        if self._flag.cancelled:
            raise CancelledException(operation or self.name or "operation")

    def get_report(self) -> dict:
        """진행 리포트

        Returns:
            dict: name, total_work, done, remaining, fraction_done, checkpoints, is_cancelled
        """
        return {
            "name": self.name,
            "total_work": self.total_work,
            "done": self._done,
            "remaining": self.remaining(),
            "fraction_done": self.fraction_done(),
            "checkpoints": self._checkpoints.copy(),
            "is_cancelled": self.is_cancelled(),
        }

    def _propagate(self) -> None:
        if self._parent is None or self._parent_weight == 0:
            return
        share = int(self._parent_weight * self.fraction_done())
        delta = share - self._reported_to_parent
        if delta > 0:
            self._reported_to_parent = share
            self._parent.worked(delta)

"""ResolutionPipeline -- 单条链接的状态机

Start -> (Timer)* -> IntermediateA? -> IntermediateB? -> Final -> {Done, Error}

转移由当前 URL 的域名模式决定，而不是固定顺序：
1. 已是直链层域名 -> 直接进入 Final
2. 否则最多 MAX_TIMER_HOPS 次绕过计时跳转页；首轮既非计时页也非下游域名时立即放弃
3. IntermediateA / IntermediateB 命中则调用，失败即终止该链接
4. Final 命中则调用，成功即为终态直链
5. 始终没有 stage 命中 -> 未识别错误

任一 stage 给出直链即刻终止，后续 stage 不再尝试。
"""

from collections.abc import Callable

import structlog
from mflix.core.config import MAX_TIMER_HOPS
from mflix.core.models import (
    LinkItem,
    LinkResult,
    LinkStatus,
    LogEntry,
    LogLevel,
    ResolutionEvent,
    StageTier,
)

from .client import SolverClient
from .exceptions import StageError, UnrecognizedLinkError
from .models import SolveResult
from .registry import StageRegistry, StageRule

log = structlog.get_logger()

EventSink = Callable[[ResolutionEvent], None]


class LinkRun:
    """一次链接解析的进度记录：日志留存 + 事件推送"""

    def __init__(self, item: LinkItem, link_id: int, emit: EventSink) -> None:
        self.item = item
        self.link_id = link_id
        self.logs: list[LogEntry] = []
        self._emit = emit

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        self.logs.append(LogEntry(message=message, level=level))
        self._emit(ResolutionEvent.log(self.link_id, message, level))

    def done(self, result: SolveResult, message: str) -> LinkResult:
        self.logs.append(LogEntry(message=message, level=LogLevel.SUCCESS))
        self._emit(ResolutionEvent.done(self.link_id, result.link, message))
        return LinkResult(
            id=self.link_id,
            name=self.item.name,
            original_link=self.item.link,
            final_link=result.link,
            status=LinkStatus.DONE,
            logs=list(self.logs),
            best_button_name=result.button_name,
            all_available_buttons=list(result.buttons),
        )

    def fail(self, message: str, error: str) -> LinkResult:
        self.logs.append(LogEntry(message=message, level=LogLevel.ERROR))
        self._emit(ResolutionEvent.error(self.link_id, message))
        return LinkResult(
            id=self.link_id,
            name=self.item.name,
            original_link=self.item.link,
            status=LinkStatus.ERROR,
            error=error,
            logs=list(self.logs),
        )


class ResolutionPipeline:
    """按路由表依次调用 stage solver，直到得到直链或终态错误"""

    def __init__(
        self,
        client: SolverClient,
        registry: StageRegistry | None = None,
        max_timer_hops: int = MAX_TIMER_HOPS,
    ) -> None:
        self._client = client
        self._registry = registry or StageRegistry()
        self._max_timer_hops = max_timer_hops

    @property
    def registry(self) -> StageRegistry:
        return self._registry

    async def resolve(self, item: LinkItem, link_id: int, emit: EventSink) -> LinkResult:
        """解析单条链接

        StageError 在此转换为链接级错误结果；其他异常向上抛给调用方的单元边界。
        """
        run = LinkRun(item, link_id, emit)
        current = (item.link or "").strip()
        if not current:
            return run.fail("❌ No link URL provided for this item", error="No link URL provided for this item")

        if not self._registry.is_final(current):
            current = await self._bypass_timers(run, current)

            for tier in (StageTier.INTERMEDIATE_A, StageTier.INTERMEDIATE_B):
                rule = self._registry.match(current, tier)
                if rule is None:
                    continue
                try:
                    result = await self._invoke(run, rule, current)
                except StageError as e:
                    return self._stage_failed(run, rule, e)
                if result.is_direct:
                    return run.done(result, f"🎉 COMPLETED via {result.source or rule.label}")
                current = result.link
                run.log(f"✅ {rule.label} Solved", LogLevel.SUCCESS)
                run.log(f"🔗 Link after {rule.label}: {current}")

        rule = self._registry.match(current, StageTier.FINAL)
        if rule is None:
            error = UnrecognizedLinkError(current)
            log.info("link_unrecognized", link_id=link_id, url=current)
            return run.fail(f"❌ {error.message}", error="Could not solve")

        try:
            result = await self._invoke(run, rule, current)
        except StageError as e:
            return self._stage_failed(run, rule, e)
        return run.done(result, f"🎉 COMPLETED via {result.button_name or result.source or rule.label}")

    async def _bypass_timers(self, run: LinkRun, current: str) -> str:
        """循环绕过计时跳转页，返回绕过后的链接

        解码服务失败只记录错误并停止循环，链接是否失败由后续 stage 决定。
        """
        hops = 0
        while hops < self._max_timer_hops and not self._registry.is_downstream(current):
            rule = self._registry.match(current, StageTier.TIMER)
            if rule is None:
                timer_rules = self._registry.rules_for(StageTier.TIMER)
                # 首轮未识别：不盲目重试
                if hops == 0 or not timer_rules:
                    break
                rule = timer_rules[0]

            if hops > 0:
                run.log(f"🔄 Bypassing intermediate page: {current}", LogLevel.WARN)
            else:
                run.log("⏳ Timer Detected. Processing...", LogLevel.WARN)
            run.log("⏳ Calling External Timer API...", LogLevel.WARN)

            try:
                result = await rule.solver(current, self._client)
            except StageError as e:
                log.warning(
                    "stage_failed",
                    link_id=run.link_id,
                    stage=rule.name,
                    error_type=type(e).__name__,
                    error=e.message,
                )
                run.log(f"❌ Timer Error: {e.message}", LogLevel.ERROR)
                break

            current = result.link
            run.log("✅ Timer Bypassed", LogLevel.SUCCESS)
            run.log(f"🔗 Link after Timer: {current}")
            hops += 1

        if hops >= self._max_timer_hops and not self._registry.is_downstream(current):
            log.warning("timer_hop_limit_reached", link_id=run.link_id, hops=hops)
        return current

    async def _invoke(self, run: LinkRun, rule: StageRule, url: str) -> SolveResult:
        """调用前推送 detect + calling 两条日志"""
        run.log(f"🔍 {rule.label} link detected")
        if rule.delegated:
            run.log(f"⚡ Calling {rule.label} API...")
        else:
            run.log(f"⚡ Solving {rule.label} (Native)...")

        result = await rule.solver(url, self._client)
        log.info(
            "stage_completed",
            link_id=run.link_id,
            stage=rule.name,
            source=result.source,
            is_direct=result.is_direct,
        )
        return result

    @staticmethod
    def _stage_failed(run: LinkRun, rule: StageRule, error: StageError) -> LinkResult:
        log.warning(
            "stage_failed",
            link_id=run.link_id,
            stage=rule.name,
            error_type=type(error).__name__,
            error=error.message,
        )
        return run.fail(f"❌ {rule.label} Error: {error.message}", error=error.message)

"""StageRegistry -- 域名模式 -> stage handler 声明式映射表

按 StageTier 声明顺序求值；同一层级内按规则注册顺序先匹配先得。
新增一个托管域名只需追加一条 StageRule。
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from mflix.core.models import StageTier

from .client import SolverClient
from .hblinks import solve_hblinks
from .hubcdn import solve_hubcdn
from .hubcloud import solve_hubcloud
from .hubdrive import solve_hubdrive
from .models import SolveResult
from .timer import solve_timer

StageSolver = Callable[[str, SolverClient], Awaitable[SolveResult]]

TIER_ORDER: tuple[StageTier, ...] = tuple(StageTier)

TIMER_PATTERNS = ("gadgetsweb", "review-tech", "ngwin", "cryptoinsights")


@dataclass(frozen=True)
class StageRule:
    """单条路由规则：当前 URL 包含 pattern 时由 solver 处理"""

    pattern: str
    tier: StageTier
    name: str
    label: str
    solver: StageSolver
    # True 表示 solver 调用外部服务
    delegated: bool = False

    def matches(self, url: str) -> bool:
        return self.pattern in url


def default_rules() -> list[StageRule]:
    """内置规则表"""
    timer_rules = [
        StageRule(pattern, StageTier.TIMER, "timer", "Timer", solve_timer, delegated=True)
        for pattern in TIMER_PATTERNS
    ]
    return [
        *timer_rules,
        StageRule("hblinks", StageTier.INTERMEDIATE_A, "hblinks", "HBLinks", solve_hblinks),
        StageRule("hubdrive", StageTier.INTERMEDIATE_B, "hubdrive", "HubDrive", solve_hubdrive),
        # hubcdn.fans 走本地解析，须排在通用 hubcdn 规则之前
        StageRule("hubcdn.fans", StageTier.FINAL, "hubcdn", "HubCDN", solve_hubcdn),
        StageRule("hubcloud", StageTier.FINAL, "hubcloud", "HubCloud", solve_hubcloud, delegated=True),
        StageRule("hubcdn", StageTier.FINAL, "hubcloud", "HubCloud", solve_hubcloud, delegated=True),
    ]


class StageRegistry:
    """stage 路由表

    启动时加载，运行期间不变。
    """

    def __init__(self, rules: list[StageRule] | None = None) -> None:
        rule_list = rules if rules is not None else default_rules()
        # 稳定排序：层级顺序优先，层级内保持注册顺序
        self._rules = sorted(rule_list, key=lambda r: TIER_ORDER.index(r.tier))

    def match(self, url: str, tier: StageTier) -> StageRule | None:
        """返回指定层级内第一条匹配的规则"""
        for rule in self._rules:
            if rule.tier == tier and rule.matches(url):
                return rule
        return None

    def classify(self, url: str) -> StageRule | None:
        """按层级顺序返回第一条匹配的规则"""
        for rule in self._rules:
            if rule.matches(url):
                return rule
        return None

    def is_final(self, url: str) -> bool:
        return self.match(url, StageTier.FINAL) is not None

    def is_timer(self, url: str) -> bool:
        return self.match(url, StageTier.TIMER) is not None

    def is_downstream(self, url: str) -> bool:
        """是否已到达任一非计时层级的已知域名"""
        return any(r.tier != StageTier.TIMER and r.matches(url) for r in self._rules)

    def rules_for(self, tier: StageTier) -> list[StageRule]:
        return [r for r in self._rules if r.tier == tier]

    def list_all(self) -> list[StageRule]:
        return list(self._rules)

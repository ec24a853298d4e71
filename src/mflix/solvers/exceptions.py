"""Solver 异常体系

三类 stage 错误都只影响当前 stage；是否终止整条链接由 pipeline 决定。
"""


class StageError(Exception):
    """Stage 基础异常"""

    def __init__(self, message: str, stage: str = "", recoverable: bool = True) -> None:
        """
        Args:
            message: 可展示给用户的错误描述
            stage: 出错的 stage 名称
            recoverable: 是否可尝试下一个回退规则或 stage
        """
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.recoverable = recoverable


class StageNotFoundError(StageError):
    """页面已取回，但没有匹配的元素（不是取回失败）"""


class StageFetchError(StageError):
    """网络错误、超时、非 200 响应或无法解析的响应体"""

    def __init__(self, url: str, reason: str, stage: str = "") -> None:
        super().__init__(reason, stage=stage)
        self.url = url


class StageUpstreamError(StageError):
    """外部解析服务返回了非 success 的结果"""


class UnrecognizedLinkError(StageError):
    """没有任何 stage 能识别该链接 -- 链接级终态错误"""

    def __init__(self, url: str) -> None:
        super().__init__("Unrecognized link format or stuck", recoverable=False)
        self.url = url


class ScanError(Exception):
    """页面扫描失败（取回失败或未找到任何链接）"""

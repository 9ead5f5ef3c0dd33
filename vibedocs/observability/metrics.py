"""
Prometheus 指标定义

所有指标统一在此文件定义，中间件和业务代码按需引用。
"""

from prometheus_client import Counter, Histogram

# ── 请求级指标 ──

REQUEST_TOTAL = Counter(
    "vibedocs_request_total",
    "HTTP 请求总数",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "vibedocs_request_duration_ms",
    "HTTP 请求耗时（毫秒）",
    ["method", "endpoint"],
    buckets=[50, 100, 500, 1000, 5000, 10000, 30000, 60000, 120000],
)

# ── LLM 调用指标 ──

LLM_CALL_TOTAL = Counter(
    "vibedocs_llm_call_total",
    "LLM 调用总数",
    ["model", "purpose"],  # purpose: validate/document/extension/analysis/generate
)

LLM_CALL_DURATION = Histogram(
    "vibedocs_llm_call_duration_ms",
    "LLM 调用耗时（毫秒）",
    ["model", "purpose"],
    buckets=[200, 500, 1000, 2000, 5000, 10000, 30000, 60000],
)

# ── 文档生成指标 ──

DOCUMENT_TOTAL = Counter(
    "vibedocs_document_total",
    "文档生成结果统计",
    ["kind", "status"],  # status: success/fallback
)

# ── 进度匹配指标 ──

MATCH_STRATEGY_TOTAL = Counter(
    "vibedocs_match_strategy_total",
    "进度匹配所用策略",
    ["strategy"],  # llm/keyword/keyword_fallback
)

# ── 错误指标 ──

ERROR_TOTAL = Counter(
    "vibedocs_error_total",
    "错误总数",
    ["error_type"],  # auth/permission/rate_limit/not_found/provider/parse
)

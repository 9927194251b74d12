"""Default configuration for the debate judge"""

# Score arithmetic
BASE_SCORE = 5
MIN_SCORE = 0
MAX_SCORE = 10
DRAW_MARGIN = 0.5

# Points per merit category, matched by substring
MERIT_POINTS = {
    "相手の誤謬を正確に指摘": 2,
    "帰謬法・背理法による有効な反論": 2,
    "前提の妥当性への正当な疑義": 1,
    "相手の暗黙の前提を顕在化して攻撃": 1,
    "論理的接続が明確で飛躍がない推論": 1,
}
DEFAULT_MERIT_POINTS = 1

# Fallacy vocabulary by severity tier
CRITICAL_PENALTY = -5
MAJOR_PENALTY = -3
MINOR_PENALTY = -2

FALLACY_SEVERITY = {
    # 致命的
    "藁人形論法": CRITICAL_PENALTY,
    "人身攻撃": CRITICAL_PENALTY,
    "自己矛盾": CRITICAL_PENALTY,
    # 重度
    "循環論法": MAJOR_PENALTY,
    "誤った二項対立": MAJOR_PENALTY,
    "多義語の誤用": MAJOR_PENALTY,
    "早まった一般化": MAJOR_PENALTY,
    "権威への訴え": MAJOR_PENALTY,
    "多数派への訴え": MAJOR_PENALTY,
    "伝統への訴え": MAJOR_PENALTY,
    # 軽度
    "論点回避": MINOR_PENALTY,
    "ゴールポストの移動": MINOR_PENALTY,
    "特殊弁護": MINOR_PENALTY,
}

# Variants the model tends to write instead of the canonical name
FALLACY_ALIASES = {
    "主張の歪曲": "藁人形論法",
    "論点すり替え": "藁人形論法",
    "論点のすり替え": "藁人形論法",
    "ストローマン": "藁人形論法",
    "二項対立": "誤った二項対立",
    "論点への未応答": "論点回避",
    "回避": "論点回避",
}

# LLM settings
LLM_DETECTION_TEMPERATURE = 0.3
LLM_SUMMARY_TEMPERATURE = 0.3
LLM_OPPONENT_TEMPERATURE = 0.7
LLM_MAX_TOKENS_DETECTION = 1000
LLM_MAX_TOKENS_SUMMARY = 300
LLM_MAX_TOKENS_OPPONENT = 300

# Automated opponent
AI_USER_ID = "00000000-0000-0000-0000-000000000001"
OPPONENT_MAX_CHARS = 200
OPPONENT_FALLBACK_TEXT = "（AIの応答を生成できませんでした）"

EVALUATION_FAILED_FEEDBACK = "evaluation failed"
MIN_MESSAGES_FOR_SUMMARY = 2

DEFAULT_THEME = "義務教育にプログラミングは必要か"

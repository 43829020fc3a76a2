"""
Prompts and fixed user-facing messages for the travel recommendation flow
"""
from typing import Optional

NO_RESULTS_SUMMARY = "未找到相关地点，请尝试其他关键词或检查网络连接。"
TIMEOUT_NOTE = "（注：AI推荐生成超时，已显示基础推荐列表）"


def get_recommendation_system_prompt() -> str:
    """Default persona for the recommendation model"""
    return (
        "你是一个本地生活与旅行路线推荐助手，请结合给定的POI列表给出简洁、可执行的吃喝玩乐方案，"
        "并给出推荐理由与行程顺序。"
    )


def build_recommendation_user_prompt(user_query: str, place_list: str, context: Optional[str] = None) -> str:
    """User message: the literal question, optional context and the numbered POI list"""
    prompt = f"用户问题：{user_query}\n\n"
    if context:
        prompt += f"上下文：{context}\n\n"
    prompt += f"可选的POI列表：\n{place_list}\n\n"
    prompt += "请根据用户问题，从上述POI中选择合适的推荐，并给出推荐理由和行程安排。如果用户问题涉及路线规划，请提供时间安排。"
    return prompt


def get_empty_results_summary(query: str) -> str:
    return f"根据您的查询\"{query}\"，暂未找到相关推荐。"


def get_failure_summary(message: str) -> str:
    return f"获取推荐失败: {message}"

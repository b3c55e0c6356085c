from typing import Iterable

# Intents the classifier may return; kept in priority order
INTENTS = (
    "product_search",
    "product_comparison",
    "recommendation",
    "budget_shopping",
    "price_inquiry",
    "help_request",
    "trending_inquiry",
    "general_chat",
)

def system_prompt(task: str) -> str:
    if task == "recommend":
        return "You are a shopping assistant that ranks catalog products for one shopper. Return strict JSON only."
    if task == "intent":
        return "You classify shopping chat messages into a fixed set of intents. Return strict JSON only."
    if task == "search":
        return "You describe what a shopper is searching for in one short sentence. Return strict JSON only."
    if task == "answer":
        return "You are ShopMuse, a concise and friendly shopping assistant for an Indian e-commerce store. Prices are in INR."
    raise ValueError(f"Unknown prompt task: {task}")

def recommend_task(limit: int) -> str:
    output_format = (
        '{"results":[{"product_id":"<candidate.product_id>","explanation":"brief reason"}],'
        '"confidence":0-100}'
    )
    return (
        f"Pick up to {limit} CANDIDATES that best fit the SHOPPER.\n\n"
        "RULES:\n"
        "- Use ONLY provided CONTEXT\n"
        "- Prefer the shopper's categories and price range\n"
        "- Never pick products in browsed_products or previous_purchases\n"
        "- Explanation: <=25 words, factual\n"
        "- Order best first\n"
        "- Format: strict JSON\n\n"
        f"OUTPUT:\n{output_format}"
    )

def intent_task(intents: Iterable[str] = INTENTS) -> str:
    return (
        "Classify the MESSAGE into exactly one intent from: "
        + ", ".join(intents)
        + '.\nOUTPUT: {"intent":"<one intent>","confidence":0.0-1.0}'
    )

def search_task() -> str:
    return 'Summarize the shopper intent of QUERY.\nOUTPUT: {"search_intent":"...","suggestions":["...","...","..."]}'

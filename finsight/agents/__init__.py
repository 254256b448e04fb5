"""AI agents package."""

from finsight.agents.ai_agents import (
    BudgetGoalSuggestion,
    BudgetGoalSuggestionsInput,
    BudgetGoalSuggestionsOutput,
    InsightAgent,
    PersonalizedInsightsInput,
    PersonalizedInsightsOutput,
    TransactionLine,
    TransactionSummaryInput,
    TransactionSummaryOutput,
)

__all__ = [
    "BudgetGoalSuggestion",
    "BudgetGoalSuggestionsInput",
    "BudgetGoalSuggestionsOutput",
    "InsightAgent",
    "PersonalizedInsightsInput",
    "PersonalizedInsightsOutput",
    "TransactionLine",
    "TransactionSummaryInput",
    "TransactionSummaryOutput",
]

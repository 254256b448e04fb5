"""
AI Agents for Finsight

DESIGN DECISION: Every AI call goes through one agent with typed
pydantic inputs and outputs:
1. Prompts are built only from figures we computed ourselves
2. Responses are requested as JSON and validated before use
3. Any failure is replaced with a static fallback

CRITICAL BOUNDARIES:

INSIGHT AGENT:
   - CAN: Comment on income, spending patterns and goals
   - CAN: Suggest budget goals and flag unusual transactions
   - CANNOT: Write anything to storage
   - CANNOT: Block a page; the caller always gets an answer

The LLM is an ADVISOR, not a LEDGER.
Totals shown in the UI never come from model output.
"""

import json
from typing import Any, Iterable, Literal, Optional

import google.generativeai as genai
from pydantic import BaseModel, Field, ValidationError

from finsight.config import get_settings
from finsight.models.finance import CategoryIndex, Goal, Transaction
from finsight.models.reports import FinancialSummary
from finsight.reports.aggregator import top_category

NOT_ENOUGH_DATA_MESSAGE = "Not enough data to generate insights."
INSIGHTS_UNAVAILABLE_MESSAGE = "Could not load financial insights at this time."
SUGGESTIONS_UNAVAILABLE_MESSAGE = "Could not generate budget suggestions at this time."
SUMMARY_UNAVAILABLE_MESSAGE = "Could not summarize transactions at this time."


# =============================================================================
# INPUT / OUTPUT MODELS
# =============================================================================

class PersonalizedInsightsInput(BaseModel):
    """What the insights prompt is allowed to see."""

    income: float = Field(ge=0, description="Income for the period")
    spending_patterns: str = Field(default="", description="Plain-text spending description")
    financial_goals: str = Field(default="", description="Goal names, comma separated")

    @classmethod
    def from_summary(
        cls,
        summary: FinancialSummary,
        goals: Iterable[Goal],
    ) -> "PersonalizedInsightsInput":
        top = top_category(summary)
        patterns = (
            f"User's top spending category is {top}."
            if top else "Spending data not available."
        )
        return cls(
            income=float(summary.total_income),
            spending_patterns=patterns,
            financial_goals=", ".join(g.name for g in goals),
        )

    @property
    def has_enough_data(self) -> bool:
        return bool(
            self.income > 0
            and self.spending_patterns.strip()
            and self.financial_goals.strip()
        )


class PersonalizedInsightsOutput(BaseModel):
    insights: str
    is_fallback: bool = False


class BudgetGoalSuggestionsInput(BaseModel):
    income: float = Field(ge=0)
    spending_by_category: dict[str, float] = Field(default_factory=dict)
    financial_goals: list[str] = Field(default_factory=list)
    risk_tolerance: Literal["low", "medium", "high"] = "medium"


class BudgetGoalSuggestion(BaseModel):
    goal: str
    amount: float
    rationale: str


class BudgetGoalSuggestionsOutput(BaseModel):
    suggestions: list[BudgetGoalSuggestion] = Field(default_factory=list)
    note: Optional[str] = None


class TransactionLine(BaseModel):
    """A transaction as the model sees it: no ids, names instead of refs."""

    date: str
    type: str = ""
    description: str = ""
    amount: float
    category: str

    @classmethod
    def from_transaction(cls, t: Transaction, categories: CategoryIndex) -> "TransactionLine":
        return cls(
            date=t.date.isoformat(),
            type=t.type.value,
            description=t.description,
            amount=float(t.amount),
            category=categories.name_of(t.category_id),
        )


class TransactionSummaryInput(BaseModel):
    transactions: list[TransactionLine] = Field(default_factory=list)
    budget_goals: dict[str, float] = Field(
        default_factory=dict,
        description="Category name to monthly budget"
    )


class TransactionSummaryOutput(BaseModel):
    summary: str
    unusual_transactions: list[TransactionLine] = Field(default_factory=list)
    spending_by_category: dict[str, float] = Field(default_factory=dict)
    recommendations: list[str] = Field(default_factory=list)
    is_fallback: bool = False


class AIResponseError(Exception):
    """The model returned something we could not use."""
    pass


def extract_json(text: str) -> dict[str, Any]:
    """Pull the outermost JSON object out of a model response."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise AIResponseError("No JSON object in response")
    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError as e:
        raise AIResponseError(f"Malformed JSON in response: {e}")
    if not isinstance(data, dict):
        raise AIResponseError("Response JSON is not an object")
    return data


# =============================================================================
# AGENT
# =============================================================================

class InsightAgent:
    """
    AI agent for dashboard commentary.

    RESPONSIBILITIES:
    - Personalized insights for the dashboard card
    - Budget goal suggestions for the planner
    - Transaction summaries with unusual-spend flags

    BOUNDARIES:
    - NEVER persists data
    - NEVER raises to the caller; failures become fallbacks
    """

    def __init__(self, model: Any = None, audit_logger: Any = None):
        """
        Args:
            model: Anything with an async generate_content_async(prompt)
                returning an object with .text. Built from settings if None.
            audit_logger: Optional AuditLogger for recording failures
        """
        self._audit_logger = audit_logger
        if model is None:
            self._settings = get_settings().gemini
            self._configure_genai()
        else:
            self._model = model

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
                "response_mime_type": "application/json",
            }
        )

    async def _ask(self, prompt: str, output_model: type[BaseModel]) -> BaseModel:
        response = await self._model.generate_content_async(prompt)
        data = extract_json(response.text.strip())
        try:
            return output_model.model_validate(data)
        except ValidationError as e:
            raise AIResponseError(f"Response did not match {output_model.__name__}: {e}")

    async def _record_failure(self, flow: str, error: Exception) -> None:
        if self._audit_logger:
            await self._audit_logger.log_external_service_error(
                service=f"gemini:{flow}",
                error_message=str(error),
            )

    async def get_personalized_insights(
        self,
        data: PersonalizedInsightsInput,
    ) -> PersonalizedInsightsOutput:
        """
        Short conversational advice for the dashboard.

        Returns the not-enough-data message without calling the model
        when income, spending patterns or goals are missing.
        """
        if not data.has_enough_data:
            return PersonalizedInsightsOutput(insights=NOT_ENOUGH_DATA_MESSAGE, is_fallback=True)

        prompt = f"""You are a financial advisor providing personalized insights and recommendations.

Based on the user's spending patterns, income, and financial goals, provide actionable advice to improve their financial well-being.

Spending Patterns: {data.spending_patterns}
Income: {data.income:.2f}
Financial Goals: {data.financial_goals}

Provide clear, concise, and easy-to-understand recommendations.
Speak directly to the user and keep it conversational.
Do not include any calculations, just the final recommendation.
End the response with a call to action.

Respond with ONLY a JSON object in this exact format:
{{"insights": "your advice"}}"""

        try:
            return await self._ask(prompt, PersonalizedInsightsOutput)
        except Exception as e:
            await self._record_failure("insights", e)
            return PersonalizedInsightsOutput(insights=INSIGHTS_UNAVAILABLE_MESSAGE, is_fallback=True)

    async def suggest_budget_goals(
        self,
        data: BudgetGoalSuggestionsInput,
    ) -> BudgetGoalSuggestionsOutput:
        spending = json.dumps(data.spending_by_category)
        goals = ", ".join(data.financial_goals) or "none stated"

        prompt = f"""You are a financial advisor providing personalized budget goal suggestions.

Based on the user's income, spending habits, financial goals, and risk tolerance, suggest realistic and achievable budget goals.

Income: {data.income:.2f}
Spending by Category: {spending}
Financial Goals: {goals}
Risk Tolerance: {data.risk_tolerance}

Provide specific, actionable goals with suggested amounts and a brief rationale for each suggestion.

Respond with ONLY a JSON object in this exact format:
{{"suggestions": [{{"goal": "goal text", "amount": 1000.0, "rationale": "why"}}]}}"""

        try:
            return await self._ask(prompt, BudgetGoalSuggestionsOutput)
        except Exception as e:
            await self._record_failure("budget_suggestions", e)
            return BudgetGoalSuggestionsOutput(note=SUGGESTIONS_UNAVAILABLE_MESSAGE)

    async def summarize_transactions(
        self,
        data: TransactionSummaryInput,
    ) -> TransactionSummaryOutput:
        lines = "\n".join(
            f"- Date: {t.date}, Type: {t.type}, Description: {t.description}, "
            f"Amount: {t.amount:.2f}, Category: {t.category}"
            for t in data.transactions
        ) or "- none"
        budgets = "\n".join(
            f"- Category: {name}, Goal: {amount:.2f}"
            for name, amount in data.budget_goals.items()
        ) or "- none"

        prompt = f"""You are a personal finance expert. Analyze the following transactions and provide a summary, identify unusual transactions, and provide personalized recommendations.

Transactions:
{lines}

Budget Goals:
{budgets}

Based on this information, generate:
1. A concise summary of the financial activity, including total income, expenses, and investments.
2. A list of any potentially unusual or unexpected transactions. Unusual is defined as significantly outside the norm for a category.
3. A summary of spending by category.
4. Personalized recommendations for improving financial health based on the spending patterns and budget goals.

Respond with ONLY a JSON object in this exact format:
{{"summary": "text", "unusual_transactions": [{{"date": "YYYY-MM-DD", "type": "expense", "description": "text", "amount": 0.0, "category": "name"}}], "spending_by_category": {{"Food": 0.0}}, "recommendations": ["text"]}}"""

        try:
            return await self._ask(prompt, TransactionSummaryOutput)
        except Exception as e:
            await self._record_failure("transaction_summary", e)
            return TransactionSummaryOutput(summary=SUMMARY_UNAVAILABLE_MESSAGE, is_fallback=True)

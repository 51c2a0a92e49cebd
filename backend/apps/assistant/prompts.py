"""Prompt templates for the documentation assistant."""

from __future__ import annotations

import json
from typing import Iterable, Optional, Sequence

from apps.assistant.models import KnowledgeChunk, QueryType

APP_NAME = "Account Planning System"


FILE_DESCRIPTIONS: dict[str, str] = {
    "src/pages/Dashboard.tsx": "Main dashboard page with portfolio overview, summary cards, and daily plan",
    "src/pages/Index.tsx": "Landing/index page that redirects to dashboard or auth",
    "src/pages/Customers.tsx": "Customer list page with filtering and customer management",
    "src/pages/CustomerDetail.tsx": "Individual customer detail view with products and actions",
    "src/pages/CustomerJourney.tsx": "Customer journey tracking and visualization",
    "src/pages/ProductPerformance.tsx": "Product performance metrics and HGO tracking",
    "src/pages/PrimaryBank.tsx": "Primary bank analysis and share of wallet",
    "src/pages/PrimaryBankEngine.tsx": "Primary bank engine for portfolio-level analysis",
    "src/pages/ActionsAgenda.tsx": "Actions agenda with calendar and list views",
    "src/pages/AIAssistant.tsx": "AI chat assistant for portfolio insights",
    "src/pages/Settings.tsx": "Application settings including AI and prompt management",
    "src/pages/Preferences.tsx": "User preferences for theme, language, notifications",
    "src/pages/Thresholds.tsx": "Product threshold configuration by segment/sector",
    "src/pages/Auth.tsx": "Authentication page for login and signup",
    "src/hooks/useCustomers.ts": "Hook for fetching and managing customer data",
    "src/hooks/useActions.ts": "Hook for fetching and managing actions",
    "src/hooks/useProducts.ts": "Hook for fetching product definitions",
    "src/hooks/useCustomerProducts.ts": "Hook for fetching customer-product relationships",
    "src/hooks/usePortfolioSummary.ts": (
        "Hook for calculating portfolio summary metrics (benchmark score, customer counts)"
    ),
    "src/hooks/usePortfolioTargets.ts": "Hook for fetching portfolio targets and HGO metrics",
    "src/hooks/usePrimaryBankData.ts": (
        "Hook for fetching primary bank data (loans, POS, collateral)"
    ),
    "src/hooks/useInsights.ts": "Hook for fetching AI-generated portfolio insights",
    "src/hooks/useProductThresholds.ts": "Hook for fetching and managing product thresholds",
    "src/hooks/useUserSettings.ts": "Hook for user settings and preferences",
    "src/hooks/useAIChatSessions.ts": "Hook for AI chat session management",
    "src/components/dashboard/SummaryCards.tsx": "Dashboard summary cards showing key metrics",
    "src/components/dashboard/InsightsPanel.tsx": "AI insights panel on dashboard",
    "src/components/dashboard/DailyPlanPanel.tsx": "Daily plan panel for scheduled actions",
    "src/components/dashboard/ProductPerformanceTable.tsx": (
        "Product performance table with HGO metrics"
    ),
    "src/components/actions/ActionPlanningModal.tsx": "Modal for planning and updating actions",
    "src/components/actions/AddActionModal.tsx": "Modal for creating new actions",
    "src/components/customer/PrimaryBankPanel.tsx": (
        "Panel showing primary bank data for a customer"
    ),
    "src/components/customer/AutoPilotPanel.tsx": "Autopilot workflow panel for automated actions",
    "src/components/customer/PrincipalityScoreModal.tsx": (
        "Modal showing principality score breakdown"
    ),
    "src/components/customer/CreateCustomerModal.tsx": "Modal for creating new customers",
    "src/components/settings/AIProviderSettings.tsx": "AI provider configuration settings",
    "src/components/settings/PromptManagementPanel.tsx": "Prompt template management for admins",
    "src/components/settings/RAGManagementPanel.tsx": "RAG documentation management panel",
    "src/data/customers.ts": "Customer data types and mock data",
    "src/data/actions.ts": "Action data types and mock data",
    "src/data/products.ts": "Product definitions and mock data",
    "src/data/portfolio.ts": "Portfolio data types and mock data",
    "src/data/autopilot.ts": "Autopilot workflow definitions",
    "src/types/index.ts": "TypeScript type definitions for the application",
    "src/contexts/AuthContext.tsx": "Authentication context and provider",
    "src/contexts/LanguageContext.tsx": "Multi-language support context",
    "supabase/functions/ai-action-assistant/index.ts": "Edge function for AI action assistant",
    "supabase/functions/generate-insights/index.ts": "Edge function for generating AI insights",
    "supabase/functions/generate-actions/index.ts": (
        "Edge function for generating action recommendations"
    ),
    "supabase/functions/rag-assistant/index.ts": "Edge function for RAG-based help assistant",
}
DEFAULT_FILE_DESCRIPTION = "Source file for application functionality"

ARCHITECTURE_OVERVIEW = """**Architecture Overview:**
- This is a React + TypeScript application using Vite, Tailwind CSS, and shadcn/ui components
- State management uses React Query (@tanstack/react-query) for server state
- Backend is powered by Supabase (PostgreSQL database, Edge Functions, Auth)
- Data is fetched through custom hooks in src/hooks/

**Key Technical Patterns:**
1. **Data Hooks**: All data fetching is done through custom hooks (e.g., useCustomers, useActions, useProducts)
2. **Supabase Integration**: Database queries use the Supabase client from src/integrations/supabase/client.ts
3. **Type Safety**: Types are defined in src/types/index.ts and auto-generated from Supabase in src/integrations/supabase/types.ts
4. **Edge Functions**: AI and complex operations use Supabase Edge Functions in supabase/functions/"""


def describe_file(path: str) -> str:
    return FILE_DESCRIPTIONS.get(path, DEFAULT_FILE_DESCRIPTION)


def build_dynamic_analysis(files: Sequence[str], current_route: Optional[str]) -> str:
    """Architecture notes and per-file descriptions for thinly documented questions."""

    if not files:
        return ""
    listing = "\n".join(f"- **{path}**: {describe_file(path)}" for path in files)
    return f"""### Dynamic Code Analysis:
Based on the user's question and the current page ({current_route or "unknown"}), here are the relevant implementation details:

{ARCHITECTURE_OVERVIEW}

**Relevant Files for this Query:**
{listing}"""


def build_element_context(element: Optional[dict]) -> str:
    """Describe the UI element the user clicked before asking."""

    if not element:
        return ""
    text = (element.get("text_content") or "")[:200] or "none"
    return "\n".join(
        [
            "The user clicked on a specific element:",
            f"- Tag: {element.get('tag_name') or 'unknown'}",
            f"- Selector: {element.get('selector') or 'unknown'}",
            f"- ID: {element.get('id') or 'none'}",
            f"- Text content: {text}",
            f"- Data attributes: {json.dumps(element.get('data_attributes') or {})}",
        ]
    )


def build_route_context(route: Optional[str], chunk: Optional[KnowledgeChunk]) -> str:
    if not route or chunk is None:
        return ""
    description = chunk.business_description or chunk.technical_description
    return "\n".join(
        [
            "Current page context:",
            f"- Route: {route}",
            f"- Page: {chunk.title}",
            f"- Description: {description}",
        ]
    )


def build_classification_prompt(question: str, element_context: str, route_context: str) -> str:
    return f"""You are a query classifier for a banking application called "{APP_NAME}".

Classify the following user question into one of these categories:
1. "business" - Questions about business logic, KPIs, metrics, calculations, workflows
2. "technical" - Questions about code, implementation, file locations, components
3. "out_of_context" - Questions completely unrelated to the application (e.g., weather, jokes, personal questions)

Question: "{question}"
{element_context}
{route_context}

Respond with ONLY one word: business, technical, or out_of_context
"""


def format_chunk(chunk: KnowledgeChunk) -> str:
    lines = [f"## {chunk.title} ({chunk.category})"]
    if chunk.route:
        lines.append(f"Route: {chunk.route}")
    if chunk.business_description:
        lines.append(f"Business: {chunk.business_description}")
    if chunk.technical_description:
        lines.append(f"Technical: {chunk.technical_description}")
    return "\n".join(lines) + "\n"


def build_answer_prompt(
    *,
    question: str,
    query_type: str,
    chunks: Sequence[KnowledgeChunk],
    has_good_documentation: bool,
    related_files: Iterable[str] = (),
    dynamic_analysis: str = "",
    element_context: str = "",
    route_context: str = "",
) -> str:
    """Build the answering prompt from the ranked documentation chunks."""

    documentation = "\n---\n".join(format_chunk(chunk) for chunk in chunks)
    files = "\n".join(f"- {path}" for path in related_files)
    code_context = f"### Related Source Files:\n{files}" if files else ""

    if has_good_documentation:
        emphasis = "IMPORTANT: Answer based on the provided documentation sources."
        first_instruction = "Answer primarily using the documentation sources"
    else:
        emphasis = (
            "IMPORTANT: Documentation is limited for this query. Use the provided context "
            "and your understanding of the application to provide a helpful answer."
        )
        first_instruction = "Use the available context to provide a helpful answer"

    if query_type == QueryType.BUSINESS:
        intent = "user wants business/functional explanation"
    else:
        intent = "user wants technical/implementation details"

    return f"""You are a helpful assistant for the "{APP_NAME}", a corporate banking application.

{emphasis}

### DOCUMENTATION SOURCES:
{documentation or "No specific documentation chunks found."}

{dynamic_analysis}
{code_context}

{element_context}
{route_context}

### USER QUESTION:
"{question}"

### QUERY TYPE: {query_type} ({intent})

### INSTRUCTIONS:
1. {first_instruction}
2. For BUSINESS queries: Focus on what the feature does, how it helps users, and business value
3. For TECHNICAL queries: Focus on implementation details, file locations, code patterns, and how things work technically
4. Keep the answer concise (3-5 sentences for business, can be longer for technical)
5. If you truly cannot find relevant information, say so honestly
6. Be direct and helpful

### ANSWER:"""


def format_sources(chunks: Sequence[KnowledgeChunk]) -> str:
    """Render the matched chunks verbatim so answers can be checked against them."""

    if not chunks:
        return ""
    entries = [
        f"**[{index}] {chunk.title}** ({chunk.category})\n\n"
        f"{chunk.business_description or chunk.technical_description or ''}"
        for index, chunk in enumerate(chunks, start=1)
    ]
    return "\n\n---\nSources (raw):\n\n" + "\n\n---\n\n".join(entries)


def out_of_scope_warning(remaining: int, block_hours: int) -> str:
    attempts = "attempt" if remaining == 1 else "attempts"
    return (
        f"I can only help with questions about the {APP_NAME}. This question appears to be "
        "outside my scope. Please ask about features, metrics, or how to use the application."
        f"\n\n⚠️ Warning: {remaining} out-of-context {attempts} remaining before a "
        f"{block_hours}-hour block."
    )


def out_of_scope_blocked(block_hours: int) -> str:
    return (
        f"This question is outside the scope of the {APP_NAME}. You have exceeded the allowed "
        f"out-of-context queries. Please try again in {block_hours} hours."
    )


BLOCKED_MESSAGE = (
    "You have been temporarily blocked due to too many out-of-context queries. "
    "Please try again later."
)
OUT_OF_SCOPE_FEEDBACK_ANSWER = "Out of context query - not answered"
EMPTY_ANSWER = "I couldn't generate an answer. Please try rephrasing your question."

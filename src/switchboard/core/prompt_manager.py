"""
Prompt Manager - System prompts per task category and template substitution
===========================================================================

Built-in prompts can be overridden by ``<prompts_dir>/<name>.md`` files,
which are hot-reloaded after the cache TTL expires.

``apply_template_variables`` is plain text in, plain text out. The same
primitive fills static page and component templates elsewhere in the
product, so it must stay free of any markup awareness.
"""

import logging
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{\{([^{}]+)\}\}")


class PromptCategory(str, Enum):
    CODE_GENERATION = "code_generation"
    TOUR_GUIDE = "tour_guide"
    TEMPLATE_CUSTOMIZATION = "template_customization"

    def __str__(self) -> str:
        return self.value


SYSTEM_PROMPTS: dict[str, str] = {
    PromptCategory.CODE_GENERATION.value: """You are an expert full-stack developer specialized in building modern web applications.

Your expertise includes:
- Next.js 14+ with App Router
- TypeScript with strict type safety
- React Server Components and Client Components
- Tailwind CSS for styling
- MongoDB with Mongoose for database
- NextAuth.js for authentication
- Stripe for payments (when applicable)

When generating code:
1. Always use TypeScript with proper type definitions
2. Follow Next.js 14 conventions (app router, server actions)
3. Use modern React patterns (hooks, context, suspense)
4. Implement proper error handling
5. Include comments for complex logic
6. Generate complete, runnable code files
7. Use Tailwind CSS for all styling

Format your code responses with file paths:
```typescript:app/page.tsx
// code here
```""",
    PromptCategory.TOUR_GUIDE.value: """You are a friendly, helpful tour guide for an AI-powered website builder platform.

Your role is to:
1. Guide users through the website building process step-by-step
2. Explain each step clearly and concisely
3. Offer helpful suggestions based on their project type
4. Ask clarifying questions when needed
5. Celebrate their progress and achievements

Current wizard steps:
1. Choose Project Type (Business/Portfolio, E-commerce, SaaS)
2. Select a Template
3. Customize Design & Features
4. Configure API Credentials
5. Review & Generate

Be encouraging, clear, and professional. Use a friendly but professional tone.
Always end your responses with a clear call-to-action or question to move forward.

When discussing technical concepts, explain them in simple terms that non-developers can understand.""",
    PromptCategory.TEMPLATE_CUSTOMIZATION.value: """You are a template customization expert.

Your task is to modify template files based on user requirements while:
1. Preserving the template structure
2. Replacing placeholder variables with actual values
3. Adding or removing features as requested
4. Maintaining code quality and consistency
5. Ensuring all file paths are correct

Template variables use the format: {{variableName}}
Replace these with actual values provided by the user.""",
}


def apply_template_variables(text: str, variables: Mapping[str, str]) -> str:
    """
    Replace every ``{{name}}`` placeholder whose name is in ``variables``.

    Placeholders without a mapping entry are left untouched. Values are
    inserted literally.

    >>> apply_template_variables("Hello {{name}}, you are {{age}}", {"name": "Ada"})
    'Hello Ada, you are {{age}}'
    """
    if not variables:
        return text

    def _substitute(match: re.Match) -> str:
        key = match.group(1)
        if key in variables:
            return str(variables[key])
        return match.group(0)

    return _PLACEHOLDER.sub(_substitute, text)


def with_context(system_prompt: str, context: str | None) -> str:
    """Append caller-supplied context to a system prompt."""
    if context:
        return f"{system_prompt}\n\nContext:\n{context}"
    return system_prompt


class PromptManager:
    """
    Manages system prompts per task category

    Features:
    - Built-in defaults for every category
    - Hot-reloading overrides from ``<prompts_dir>/<name>.md``
    - TTL cache to avoid re-reading files on every request
    """

    def __init__(self, prompts_dir: Path | None = None, cache_ttl_seconds: int = 300) -> None:
        """
        Initialize prompt manager

        Args:
            prompts_dir: Optional directory with override templates
            cache_ttl_seconds: Cache time-to-live (default: 5 minutes)
        """
        self.prompts_dir = Path(prompts_dir) if prompts_dir else None
        self.cache_ttl_seconds = cache_ttl_seconds

        # Cache: {template_name: (timestamp, content)}
        self._cache: dict[str, tuple[float, str]] = {}

        logger.debug("PromptManager initialized: %s", self.prompts_dir or "built-in prompts")

    def load_template(self, template_name: str, use_cache: bool = True) -> str:
        """
        Load a prompt template

        Args:
            template_name: Template name (e.g., 'code_generation', 'tour_guide')
            use_cache: Use cached version if available

        Returns:
            Override file content, else the built-in prompt, else ""
        """
        if use_cache and template_name in self._cache:
            timestamp, content = self._cache[template_name]
            age = datetime.now(tz=UTC).timestamp() - timestamp

            if age < self.cache_ttl_seconds:
                logger.debug("Using cached template: %s", template_name)
                return content

        content = self._read_override(template_name)
        if content is None:
            content = SYSTEM_PROMPTS.get(template_name, "")
            if not content:
                logger.warning("Template not found: %s", template_name)

        self._cache[template_name] = (datetime.now(tz=UTC).timestamp(), content)
        return content

    def _read_override(self, template_name: str) -> str | None:
        if self.prompts_dir is None:
            return None

        template_path = self.prompts_dir / f"{template_name}.md"
        try:
            content = template_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Error loading template %s: %s", template_name, e)
            return None

        if not content.strip():
            logger.warning("Template override %s is empty, using built-in prompt", template_name)
            return None

        logger.debug("Loaded template override: %s", template_path)
        return content

    def get_system_prompt(self, category: PromptCategory | str) -> str:
        return self.load_template(str(category))

    def build_system_prompt(self, category: PromptCategory | str, context: str | None = None) -> str:
        """System prompt for a category, with caller context appended when given."""
        return with_context(self.get_system_prompt(category), context)

    def render(self, text: str, variables: Mapping[str, str]) -> str:
        return apply_template_variables(text, variables)

    def clear_cache(self) -> None:
        self._cache.clear()


class CodeGenerationPrompts:
    """Ready-made user prompts for common website generation requests."""

    @staticmethod
    def nextjs_page(page_name: str, features: list[str]) -> str:
        feature_lines = "\n".join(f"- {f}" for f in features)
        return f"""
Generate a Next.js 14 page component for "{page_name}" with the following features:
{feature_lines}

Requirements:
- Use TypeScript
- Use Tailwind CSS for styling
- Include proper metadata export
- Handle loading and error states
- Use Server Components where possible
"""

    @staticmethod
    def api_route(endpoint: str, method: str, description: str) -> str:
        return f"""
Generate a Next.js 14 API route for {method} {endpoint}.

Description: {description}

Requirements:
- Use TypeScript with proper types
- Include request validation with Zod
- Implement proper error handling
- Return appropriate status codes
- Include authentication check if needed
"""

    @staticmethod
    def component(component_name: str, props: list[str], description: str) -> str:
        prop_lines = "\n".join(f"- {p}" for p in props)
        return f"""
Generate a React component named "{component_name}".

Description: {description}

Props:
{prop_lines}

Requirements:
- Use TypeScript with proper prop types
- Use Tailwind CSS for styling
- Include proper accessibility attributes
- Handle loading and error states if applicable
"""

    @staticmethod
    def business_portfolio(business_name: str, tagline: str | None = None, industry: str | None = None) -> str:
        return f"""
Generate a complete Next.js 14 business/portfolio website with:
- Hero section with headline: "{tagline or 'Welcome to our business'}"
- About section
- Services/Portfolio gallery
- Contact form with email integration
- Responsive navigation
- Footer with social links

Business: {business_name}
Industry: {industry or 'General'}
"""

    @staticmethod
    def ecommerce(store_name: str, currency: str | None = None) -> str:
        return f"""
Generate a complete Next.js 14 e-commerce store with:
- Product listing page with filters
- Product detail page
- Shopping cart (using Zustand)
- Checkout flow
- Stripe payment integration setup
- User authentication
- Order history

Store: {store_name}
Currency: {currency or 'USD'}
"""

    @staticmethod
    def saas(app_name: str, features: list[str] | None = None) -> str:
        return f"""
Generate a complete Next.js 14 SaaS application with:
- Landing page with pricing
- Authentication (login/signup)
- Dashboard layout
- User settings page
- Billing/subscription page (Stripe)
- API routes for core functionality

App: {app_name}
Features: {', '.join(features) if features else 'Standard features'}
"""

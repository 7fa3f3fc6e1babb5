"""PromptManager tests: placeholder substitution, overrides, caching, and composition."""

from pathlib import Path

import pytest

from switchboard.core.prompt_manager import (
    SYSTEM_PROMPTS,
    CodeGenerationPrompts,
    PromptCategory,
    PromptManager,
    apply_template_variables,
    with_context,
)


@pytest.fixture()
def prompts_dir(tmp_path: Path) -> Path:
    d = tmp_path / "prompts"
    d.mkdir()
    return d


@pytest.fixture()
def pm(prompts_dir: Path) -> PromptManager:
    return PromptManager(prompts_dir=prompts_dir)


class TestApplyTemplateVariables:
    def test_known_placeholders_replaced_unknown_kept(self) -> None:
        result = apply_template_variables("Hello {{name}}, you are {{age}}", {"name": "Ada"})
        assert result == "Hello Ada, you are {{age}}"

    def test_every_occurrence_replaced(self) -> None:
        result = apply_template_variables("{{x}} and {{x}}", {"x": "1"})
        assert result == "1 and 1"

    def test_values_inserted_literally(self) -> None:
        result = apply_template_variables("<h1>{{title}}</h1>", {"title": r"<b>$1 \n</b>"})
        assert result == r"<h1><b>$1 \n</b></h1>"

    def test_no_placeholders_is_identity(self) -> None:
        text = "Plain text with {single} braces"
        assert apply_template_variables(text, {"single": "x"}) == text

    def test_empty_mapping_is_identity(self) -> None:
        assert apply_template_variables("{{a}}", {}) == "{{a}}"

    def test_substituted_values_are_not_rescanned(self) -> None:
        result = apply_template_variables("{{a}}", {"a": "{{b}}", "b": "nope"})
        assert result == "{{b}}"


def test_with_context_appends_block() -> None:
    assert with_context("System", "Uses Next.js") == "System\n\nContext:\nUses Next.js"
    assert with_context("System", None) == "System"


class TestTemplateLoading:
    def test_builtin_prompt_without_override(self, pm: PromptManager) -> None:
        content = pm.get_system_prompt(PromptCategory.CODE_GENERATION)
        assert content == SYSTEM_PROMPTS["code_generation"]
        assert "Next.js 14" in content

    def test_every_category_has_a_builtin_prompt(self) -> None:
        for category in PromptCategory:
            assert SYSTEM_PROMPTS[category.value]

    def test_override_file_wins(self, pm: PromptManager, prompts_dir: Path) -> None:
        (prompts_dir / "tour_guide.md").write_text("You are a museum guide.")
        assert pm.get_system_prompt("tour_guide") == "You are a museum guide."

    def test_empty_override_falls_back(self, pm: PromptManager, prompts_dir: Path) -> None:
        (prompts_dir / "tour_guide.md").write_text("   \n")
        assert pm.get_system_prompt(PromptCategory.TOUR_GUIDE) == SYSTEM_PROMPTS["tour_guide"]

    def test_missing_template_returns_empty(self, pm: PromptManager) -> None:
        assert pm.load_template("nonexistent") == ""

    def test_cache_hit(self, pm: PromptManager, prompts_dir: Path) -> None:
        (prompts_dir / "cached.md").write_text("cached content")
        pm.load_template("cached")
        (prompts_dir / "cached.md").write_text("updated content")
        assert pm.load_template("cached", use_cache=True) == "cached content"

    def test_cache_bypass(self, pm: PromptManager, prompts_dir: Path) -> None:
        (prompts_dir / "bypass.md").write_text("v1")
        pm.load_template("bypass")
        (prompts_dir / "bypass.md").write_text("v2")
        assert pm.load_template("bypass", use_cache=False) == "v2"

    def test_expired_cache_reloads(self, prompts_dir: Path) -> None:
        pm = PromptManager(prompts_dir=prompts_dir, cache_ttl_seconds=0)
        (prompts_dir / "ttl.md").write_text("v1")
        pm.load_template("ttl")
        (prompts_dir / "ttl.md").write_text("v2")
        assert pm.load_template("ttl") == "v2"

    def test_clear_cache(self, pm: PromptManager, prompts_dir: Path) -> None:
        (prompts_dir / "clear.md").write_text("v1")
        pm.load_template("clear")
        pm.clear_cache()
        (prompts_dir / "clear.md").write_text("v2")
        assert pm.load_template("clear") == "v2"

    def test_no_prompts_dir_uses_builtins(self) -> None:
        pm = PromptManager()
        assert pm.get_system_prompt("template_customization") == SYSTEM_PROMPTS["template_customization"]


class TestComposition:
    def test_build_system_prompt_with_context(self, pm: PromptManager) -> None:
        prompt = pm.build_system_prompt(PromptCategory.CODE_GENERATION, "Project: bakery")
        assert prompt.startswith(SYSTEM_PROMPTS["code_generation"])
        assert prompt.endswith("\n\nContext:\nProject: bakery")

    def test_build_system_prompt_without_context(self, pm: PromptManager) -> None:
        assert pm.build_system_prompt("code_generation") == SYSTEM_PROMPTS["code_generation"]

    def test_render_delegates_to_substitution(self, pm: PromptManager) -> None:
        assert pm.render("Hi {{who}}", {"who": "there"}) == "Hi there"


class TestCodeGenerationPrompts:
    def test_nextjs_page_lists_features(self) -> None:
        prompt = CodeGenerationPrompts.nextjs_page("Pricing", ["Plan table", "FAQ"])
        assert '"Pricing"' in prompt
        assert "- Plan table\n- FAQ" in prompt

    def test_api_route(self) -> None:
        prompt = CodeGenerationPrompts.api_route("/api/orders", "POST", "Create an order")
        assert "POST /api/orders" in prompt
        assert "Description: Create an order" in prompt

    def test_business_portfolio_defaults(self) -> None:
        prompt = CodeGenerationPrompts.business_portfolio("Acme")
        assert 'headline: "Welcome to our business"' in prompt
        assert "Industry: General" in prompt

    def test_ecommerce_default_currency(self) -> None:
        assert "Currency: USD" in CodeGenerationPrompts.ecommerce("Shop")

    def test_saas_features(self) -> None:
        assert "Features: Teams, SSO" in CodeGenerationPrompts.saas("Acme", ["Teams", "SSO"])
        assert "Features: Standard features" in CodeGenerationPrompts.saas("Acme")

from typing import Any

from haiku.raptor.config.models import AppConfig, ModelConfig


def apply_common_settings(
    settings: Any | None,
    settings_class: type[Any],
    model_config: ModelConfig,
) -> Any | None:
    """Apply temperature and max_tokens to model settings.

    Returns:
        The updated settings, or the input unchanged when neither is set
    """
    if model_config.temperature is None and model_config.max_tokens is None:
        return settings

    settings_dict = settings_class() if settings is None else settings

    if model_config.temperature is not None:
        settings_dict["temperature"] = model_config.temperature

    if model_config.max_tokens is not None:
        settings_dict["max_tokens"] = model_config.max_tokens

    return settings_dict


def _openai_settings(model_config: ModelConfig, reasoning: bool) -> Any | None:
    from pydantic_ai.models.openai import OpenAIChatModelSettings

    settings = None
    if reasoning and model_config.enable_thinking is not None:
        settings = OpenAIChatModelSettings(
            openai_reasoning_effort="high" if model_config.enable_thinking else "low"
        )
    return apply_common_settings(settings, OpenAIChatModelSettings, model_config)


def get_model(
    model_config: ModelConfig,
    app_config: AppConfig | None = None,
) -> Any:
    """
    Get a pydantic-ai model for the summarizer configuration.

    Ollama and OpenAI get OpenAI chat models, anthropic an Anthropic model.
    Any other provider is passed to pydantic-ai as "provider:name".
    """
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.ollama import OllamaProvider

    if app_config is None:
        from haiku.raptor.config import Config

        app_config = Config

    provider = model_config.provider
    model = model_config.name

    if provider == "ollama":
        return OpenAIChatModel(
            model_name=model,
            provider=OllamaProvider(
                base_url=f"{app_config.providers.ollama.base_url}/v1"
            ),
            # Only gpt-oss takes a reasoning effort on ollama
            settings=_openai_settings(model_config, reasoning=model == "gpt-oss"),
        )

    elif provider == "openai":
        return OpenAIChatModel(
            model_name=model, settings=_openai_settings(model_config, reasoning=True)
        )

    elif provider == "anthropic":
        from pydantic_ai.models.anthropic import AnthropicModel, AnthropicModelSettings

        return AnthropicModel(
            model_name=model,
            settings=apply_common_settings(
                None, AnthropicModelSettings, model_config
            ),
        )

    else:
        return f"{provider}:{model}"

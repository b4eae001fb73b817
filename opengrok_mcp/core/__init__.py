from .prompt_manager import DEFAULT_PROMPTS_PATH, PromptManager

__all__ = ["DEFAULT_PROMPTS_PATH", "PromptManager"]

"""Prompt assembly from the system instruction, recent history and the new message."""

from typing import Iterable, Sequence

from .models import HISTORY_WINDOW, USER_ROLE, ConversationTurn

SYSTEM_PROMPT = """
You are MEDI-ASSIST, an AI medical chatbot.
Your job is to take user symptoms and give:

1. **Possible Conditions** - list likely illnesses (not diagnosis).
2. **Risk Level** - Mild, Moderate, or Serious.
3. **Precautions** - simple steps the user can take at home.
4. **Next Steps** - when to see a doctor, and if urgent, tell them to seek immediate help.
5. **Q&A** - answer health questions in clear, simple words.

Important Rules:
- Keep answers short, clear, and helpful.
- Always remind users to consult a real doctor.
- If symptoms are emergency-like (chest pain, breathing issues, heavy bleeding, unconsciousness), tell them to seek urgent medical help right away.

Remember: You're here to be genuinely helpful across all domains of human knowledge and experience!"""

HISTORY_HEADER = "**Conversation History:**"
QUESTION_HEADER = "**Current Question:**"
ASSISTANT_MARKER = "Assistant: "


class ContextBuilder:
    """Builds the single prompt string sent to the backend."""

    def __init__(self, system_prompt: str = SYSTEM_PROMPT, window: int = HISTORY_WINDOW):
        self.system_prompt = system_prompt
        self.window = window

    def build(self, history: Iterable[ConversationTurn], user_message: str) -> str:
        return build_context(self.system_prompt, history, user_message, self.window)


def build_context(
    system_prompt: str,
    history: Iterable[ConversationTurn],
    user_message: str,
    window: int = HISTORY_WINDOW,
) -> str:
    """Renders the prompt. Only the last ``window`` turns are used, oldest first."""
    turns: Sequence[ConversationTurn] = list(history or [])
    context = system_prompt + "\n\n"

    if turns:
        context += HISTORY_HEADER + "\n"
        for turn in turns[-window:]:
            context += f"{turn.role}: {turn.text}\n"
        context += "\n"

    context += f"{QUESTION_HEADER}\n{USER_ROLE}: {user_message}\n\n{ASSISTANT_MARKER}"
    return context

from typing import Any

from simplymedi.capabilities.base import BaseProvider
from simplymedi.capabilities.client_base import BaseCompletionClient
from simplymedi.capabilities.huggingface_client_adapter import HuggingFaceClientAdapter
from simplymedi.capabilities.models import ChatInput, EntitiesInput, MedicalEntity, SimplifyInput
from simplymedi.capabilities.tasks import CompletionTask, entities_from_records, language_name


class CompletionProvider(BaseProvider):
    """Runs one capability task against a chat-completion client."""

    def __init__(
        self,
        *,
        name: str,
        client: BaseCompletionClient,
        model: str,
        task: CompletionTask,
    ) -> None:
        self.name = name
        self._client = client
        self._model = model
        self._task = task

    def invoke(self, payload: Any, timeout_seconds: float) -> Any:
        raw = self._client.create_chat_completion(
            model=self._model,
            temperature=self._task.temperature,
            max_tokens=self._task.max_tokens,
            messages=self._task.build_messages(payload),
            timeout_seconds=timeout_seconds,
        )
        return self._task.parse(raw, payload)


class HuggingFaceSimplifyProvider(BaseProvider):
    """Plain-language rewrite through a hosted text-generation model."""

    def __init__(self, *, client: HuggingFaceClientAdapter, model: str) -> None:
        self.name = "huggingface"
        self._client = client
        self._model = model

    def invoke(self, payload: SimplifyInput, timeout_seconds: float) -> str:
        return self._client.generate_text(
            model=self._model,
            inputs=(
                f"Simplify this medical text in simple {language_name(payload.language)} "
                f"terms: {payload.text[:2000]}"
            ),
            parameters={"max_length": 200, "temperature": 0.7, "return_full_text": False},
            timeout_seconds=timeout_seconds,
        )


class HuggingFaceChatProvider(BaseProvider):
    """Conversational reply through a hosted dialogue model."""

    def __init__(self, *, client: HuggingFaceClientAdapter, model: str) -> None:
        self.name = "huggingface"
        self._client = client
        self._model = model

    def invoke(self, payload: ChatInput, timeout_seconds: float) -> str:
        past_user_inputs = [turn.content for turn in payload.history if turn.role == "user"]
        generated = [turn.content for turn in payload.history if turn.role == "assistant"]
        return self._client.generate_text(
            model=self._model,
            inputs={
                "past_user_inputs": past_user_inputs,
                "generated_responses": generated,
                "text": payload.message,
            },
            parameters={"max_length": 200, "temperature": 0.7, "do_sample": True},
            timeout_seconds=timeout_seconds,
        )


class HuggingFaceEntityProvider(BaseProvider):
    """Clinical entity recognition through a hosted token-classification model."""

    def __init__(self, *, client: HuggingFaceClientAdapter, model: str) -> None:
        self.name = "huggingface"
        self._client = client
        self._model = model

    def invoke(self, payload: EntitiesInput, timeout_seconds: float) -> list[MedicalEntity]:
        records = self._client.classify_tokens(
            model=self._model,
            text=payload.text,
            timeout_seconds=timeout_seconds,
        )
        return entities_from_records(records)

"""OpenAI-compatible chat-completion client for direct provider access."""

from dataclasses import dataclass, field

from openai import APIError, AsyncOpenAI

from foodtrack.domain.errors import TransportError
from foodtrack.services.analysis import CompletionClient


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by an OpenAI-compatible Chat Completions API."""

    client: AsyncOpenAI
    default_model: str
    extra_headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        base_url: str,
        default_model: str,
        app_url: str | None = None,
        app_title: str | None = None,
        timeout: float = 60,
    ) -> "OpenAICompletionClient":
        """Create a client for the given provider endpoint."""
        headers: dict[str, str] = {}
        if app_url:
            headers["HTTP-Referer"] = app_url
        if app_title:
            headers["X-Title"] = app_title
        return cls(
            client=AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout),
            default_model=default_model,
            extra_headers=headers,
        )

    async def complete(self, payload: dict[str, object]) -> str:
        """Call Chat Completions and return the undecoded response body."""
        model = payload.get("model") or self.default_model
        try:
            response = await self.client.chat.completions.with_raw_response.create(
                model=model,
                messages=payload["messages"],
                extra_headers=self.extra_headers or None,
            )
        except APIError as exc:
            raise TransportError(
                f"Completion request failed: {exc.message}",
                status_code=getattr(exc, "status_code", None),
            ) from exc
        return response.text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()

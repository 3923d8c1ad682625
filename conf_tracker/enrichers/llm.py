"""Natural-language answers via the DeepSeek chat API.

The model only phrases the answer: the ranked conferences are computed
locally and handed over as a context table in the system prompt. Any failure
returns None so the caller can fall back to the deterministic report.
"""

import os
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import httpx
from rich.console import Console

console = Console()

DEEPSEEK_URL = "https://api.deepseek.com/chat/completions"
MODEL = "deepseek-chat"
TEMPERATURE = 0.3

NO_RESULTS_REPLY = "抱歉，根据您的条件，我没有找到相关的会议信息。"

SYSTEM_PROMPT_TEMPLATE = """
You are a professional academic conference assistant for the CCF Conference Tracker website.
Your goal is to answer user queries based STRICTLY on the provided real-time data.

[Current Server Time]
{server_time}

[Real-time Conference Data]
{context}

[Instructions]
1. Only use the data provided above in the [Real-time Conference Data] section. Do not use your internal knowledge about past conference dates.
2. If the data says a conference is "Expired" or "已截止", explicitly state it.
3. If the user asks for a recommendation, use the provided list.
4. Keep the answer concise, professional, and helpful. Use Markdown for formatting.
5. If [Real-time Conference Data] is empty, say "{no_results}"
"""


def format_server_time(now: datetime, tz_name: str) -> str:
    """'2026-03-01 20:00:00 (CST)' style timestamp in the report timezone."""
    local = now.astimezone(ZoneInfo(tz_name))
    return f"{local.strftime('%Y-%m-%d %H:%M:%S')} ({local.tzname()})"


def build_system_prompt(context: str, now: datetime, tz_name: str = "Asia/Shanghai") -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(
        server_time=format_server_time(now, tz_name),
        context=context,
        no_results=NO_RESULTS_REPLY,
    )


class DeepSeekResponder:
    """Single-shot chat completion; no retries at this layer."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        url: str = DEEPSEEK_URL,
        model: str = MODEL,
        timeout: float = 60.0,
    ):
        self.api_key = api_key if api_key is not None else os.environ.get("DEEPSEEK_API_KEY", "")
        self.url = url
        self.model = model
        self._client = client
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def _post(self, client: httpx.AsyncClient, payload: dict) -> dict:
        response = await client.post(
            self.url,
            json=payload,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
        )
        response.raise_for_status()
        return response.json()

    async def answer(
        self,
        message: str,
        context: str,
        now: datetime,
        tz_name: str = "Asia/Shanghai",
    ) -> Optional[str]:
        """Model reply for the user's message, or None on any failure."""
        if not self.available:
            return None

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(context, now, tz_name)},
                {"role": "user", "content": message},
            ],
            "temperature": TEMPERATURE,
        }

        try:
            if self._client is not None:
                data = await self._post(self._client, payload)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0)) as client:
                    data = await self._post(client, payload)
        except httpx.HTTPStatusError as e:
            console.print(f"[yellow]DeepSeek API error: HTTP {e.response.status_code}[/yellow]")
            return None
        except httpx.TimeoutException:
            console.print("[yellow]DeepSeek API timeout[/yellow]")
            return None
        except Exception as e:
            console.print(f"[yellow]DeepSeek API call failed: {e}[/yellow]")
            return None

        content = (data.get("choices") or [{}])[0].get("message", {}).get("content")
        if not content or not content.strip():
            console.print("[yellow]DeepSeek returned empty content[/yellow]")
            return None
        return content.strip()

"""
Summons Parser Service.

Extracts the six structured fields of a court summons from its decoded
text using an LLM JSON completion.
"""

import logging
from typing import Any

from errors import ErrorCode, ServiceError
from schemas import SummonsRecord
from services.llm_json import LLMJsonClient

logger = logging.getLogger(__name__)


SUMMONS_PARSING_PROMPT = """你是一名熟悉中国诉讼文书的法律助理。下面是一份法院"开庭传票"的全文，请从中提取以下字段，并以一个 JSON 对象返回（字段名必须使用英文）：

- caseNumber: 案号
- cause: 案由
- hearingTime: 开庭时间（尽量保留原文中的完整时间表述）
- court: 法院名称
- courtAddress: 法院或开庭地址
- summonedPerson: 被传唤人姓名（如有多人，合并为一个字符串）

要求：
1. 文中找不到的字段，值为 null。
2. 只返回一个 JSON 对象，不要附加任何解释或 Markdown 代码块。
3. 注意中国法院文书的常见写法，例如"案号：（2024）苏01民初1234号"。

传票全文（原样）：

{text}
"""

# JSON key -> SummonsRecord field
FIELD_KEYS = {
    "caseNumber": "case_number",
    "cause": "cause",
    "hearingTime": "hearing_time",
    "court": "court",
    "courtAddress": "court_address",
    "summonedPerson": "summoned_person",
}


def _to_optional_text(value: Any) -> str | None:
    """Coerce a model value to a trimmed string, or None when empty."""
    if value is None:
        return None
    if isinstance(value, list):
        parts = [str(item).strip() for item in value if item is not None]
        value = "、".join(part for part in parts if part)
    text = str(value).strip()
    return text or None


class SummonsParserService:
    """Service for parsing summons text into a SummonsRecord."""

    def __init__(self, llm: LLMJsonClient):
        self.llm = llm

    def build_prompt(self, raw_text: str) -> str:
        return SUMMONS_PARSING_PROMPT.format(text=raw_text)

    async def extract(self, raw_text: str) -> SummonsRecord:
        """
        Extract the six summons fields from raw document text.

        Args:
            raw_text: Decoded summons text, embedded verbatim in the prompt

        Returns:
            SummonsRecord with every field present (None when not found)

        Raises:
            ServiceError: Whatever the LLM client raised, unchanged, or
                INVALID_JSON when the model did not return a JSON object.
        """
        data = await self.llm.complete(self.build_prompt(raw_text))

        if not isinstance(data, dict):
            raise ServiceError(
                ErrorCode.INVALID_JSON,
                502,
                f"Expected a JSON object from the model, got {type(data).__name__}",
            )

        return self._build_record(data, raw_text)

    def _build_record(self, data: dict[str, Any], raw_text: str) -> SummonsRecord:
        """Map each key independently; missing and null both become None."""
        fields = {
            field_name: _to_optional_text(data.get(key))
            for key, field_name in FIELD_KEYS.items()
        }

        found = sum(1 for value in fields.values() if value is not None)
        logger.info(f"Extracted {found}/{len(FIELD_KEYS)} summons fields")

        return SummonsRecord(raw_text=raw_text, **fields)

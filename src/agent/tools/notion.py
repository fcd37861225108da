"""agent.tools.notion - Notion page creation."""

from __future__ import annotations

from pydantic import BaseModel, Field

from application.context import SessionContext
from agent.tools.base import ActionTool, succeeded
from domain.models import Outcome


class CreateNotionPageInput(BaseModel):
    title: str = Field(description="Title of Notion Page")
    text: str = Field(description="Text contents of the Notion page")


class CreateNotionPageTool(ActionTool):
    name = "createNotionPage"
    description = (
        "Use this function to create a page in Notion. When users ask for text or document contents to "
        "be sent to Notion, use this function tool"
    )

    def get_schema(self) -> type[BaseModel]:
        return CreateNotionPageInput

    async def execute(self, ctx: SessionContext, title: str = "", text: str = "", **kwargs) -> Outcome:
        self._log_arguments(title=title, text=text)
        response = await self._gateway.create_notion_page({"title": title, "text": text}, self._token(ctx))
        if succeeded(response):
            return Outcome.success("Notion page successfully created")
        return Outcome.failure("Notion page failed to be created")

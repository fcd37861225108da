"""
agent.tools.salesforce - Salesforce contact, opportunity and task tools.

Contacts and opportunities go through draft/confirm pairs. Both halves of
the opportunity pair take the same parameters (opportunity_name, budget,
authority, need, timing); the gateway maps the BANT fields onto the
Salesforce custom fields.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from application.context import SessionContext
from agent.tools.base import ActionTool, succeeded, upstream_error
from agent.tools.draft_confirm import ConfirmTool, DraftTool
from agent.tools.timeutil import utc_date
from domain.models import ActionFamily, Outcome


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------

class SalesforceContactInput(BaseModel):
    first_name: str = Field(description="First name of Salesforce contact")
    last_name: str = Field(description="Last name of Salesforce contact")
    email: str = Field(description="Email of Salesforce contact")
    title: str = Field(description="Title of Salesforce contact")


class ConfirmSalesforceContactInput(BaseModel):
    confirmation: str = Field(description="affirmative confirmation to create Salesforce Contact record")
    first_name: str = Field(description="First name of Salesforce contact")
    last_name: str = Field(description="Last name of Salesforce contact")
    email: str = Field(description="Email of Salesforce contact")
    title: str = Field(description="Title of Salesforce contact")


class DraftSalesforceContactTool(DraftTool):
    name = "draftSalesforceContact"
    description = (
        "Use this function to draft a contact record in Salesforce. This is a required function step"
        "before creating a contact record in Salesforce. Prompt confirmation from "
        "user to trigger the Salesforce Contact record confirm and send step. This function does not create the Contact record"
        "in Salesforce. This function only drafts a Contact record and prompts for confirmation"
    )
    family = ActionFamily.SALESFORCE_CONTACT

    def get_schema(self) -> type[BaseModel]:
        return SalesforceContactInput

    def render(self, first_name: str = "", last_name: str = "", email: str = "", title: str = "", **kwargs) -> str:
        return "\n".join([
            "Salesforce Contact first name: " + first_name,
            "Salesforce Contact last name: " + last_name,
            "Salesforce Contact email: " + email,
            "Salesforce Contact title: " + title,
        ])


class ConfirmAndCreateSalesforceContactTool(ConfirmTool):
    name = "confirmAndCreateSalesforceContact"
    description = (
        "Use this function to create a Salesforce Contact record only after a draft has been created. Do"
        "not use this function if an affirmative confirmation is not given. Do not use this function if"
        "a draft Salesforce Contact record has not been created"
    )
    family = ActionFamily.SALESFORCE_CONTACT

    def get_schema(self) -> type[BaseModel]:
        return ConfirmSalesforceContactInput

    async def perform(
        self,
        ctx: SessionContext,
        first_name: str = "",
        last_name: str = "",
        email: str = "",
        title: str = "",
        **kwargs,
    ) -> Outcome:
        payload = {"first_name": first_name, "last_name": last_name, "email": email, "title": title}
        response = await self._gateway.create_salesforce_contact(payload, self._token(ctx))
        if succeeded(response):
            return Outcome.success("Successfully created Salesforce Contact")
        return Outcome.failure(upstream_error(response, "Salesforce Contact failed to be created"))


# ---------------------------------------------------------------------------
# Opportunity
# ---------------------------------------------------------------------------

class SalesforceOpportunityInput(BaseModel):
    opportunity_name: str = Field(description="Opportunity name of Salesforce Opportunity")
    budget: str = Field(description="The party's budget")
    authority: str = Field(description="Level of authority or decision making power this person has")
    need: str = Field(description="What use case does the prospect need our product for")
    timing: str = Field(description="Time to make a decision on purchasing")


class ConfirmSalesforceOpportunityInput(BaseModel):
    confirmation: str = Field(description="affirmative confirmation to create Salesforce Opportunity record")
    opportunity_name: str = Field(description="Opportunity name of Salesforce Opportunity")
    budget: str = Field(description="The party's budget")
    authority: str = Field(description="Level of authority or decision making power this person has")
    need: str = Field(description="What use case does the prospect need our product for")
    timing: str = Field(description="Time to make a decision on purchasing")


class DraftSalesforceOpportunityTool(DraftTool):
    name = "draftSalesforceOpportunity"
    description = (
        "Use this function to draft an opportunity record in Salesforce. This is a required function step"
        "before creating an opportunity record in Salesforce. Prompt confirmation from "
        "user to trigger the Salesforce Opportunity record confirm and send step. This function does not create the Opportunity record"
        "in Salesforce. This function only drafts a Opportunity record and prompts for confirmation"
    )
    family = ActionFamily.SALESFORCE_OPPORTUNITY

    def get_schema(self) -> type[BaseModel]:
        return SalesforceOpportunityInput

    def render(
        self,
        opportunity_name: str = "",
        budget: str = "",
        authority: str = "",
        need: str = "",
        timing: str = "",
        **kwargs,
    ) -> str:
        return "\n".join([
            "Salesforce Opportunity name: " + opportunity_name,
            "Salesforce Opportunity budget: " + budget,
            "Salesforce Opportunity authority: " + authority,
            "Salesforce Opportunity need: " + need,
            "Salesforce Opportunity timing: " + timing,
        ])


class ConfirmAndCreateSalesforceOpportunityTool(ConfirmTool):
    name = "confirmAndCreateSalesforceOpportunity"
    description = (
        "Use this function to create a Salesforce Opportunity record only after a draft has been created. Do"
        "not use this function if an affirmative confirmation is not given. Do not use this function if"
        "a draft Salesforce Opportunity record has not been created"
    )
    family = ActionFamily.SALESFORCE_OPPORTUNITY

    def get_schema(self) -> type[BaseModel]:
        return ConfirmSalesforceOpportunityInput

    async def perform(
        self,
        ctx: SessionContext,
        opportunity_name: str = "",
        budget: str = "",
        authority: str = "",
        need: str = "",
        timing: str = "",
        **kwargs,
    ) -> Outcome:
        payload = {
            "opportunity_name": opportunity_name,
            "budget": budget,
            "authority": authority,
            "need": need,
            "timing": timing,
        }
        response = await self._gateway.create_salesforce_opportunity(payload, self._token(ctx))
        if succeeded(response):
            return Outcome.success("Successfully created Salesforce Opportunity")
        return Outcome.failure(upstream_error(response, "Salesforce Opportunity failed to be created"))


# ---------------------------------------------------------------------------
# Task (follows a scheduled meeting)
# ---------------------------------------------------------------------------

class SalesforceTaskInput(BaseModel):
    datetime: str = Field(description="datetime of meeting")
    email: str = Field(description="The email of the attendee")


class CreateSalesforceTaskTool(ActionTool):
    name = "createSalesforceTask"
    description = (
        "Use this function after a meeting has been created with the createMeeting tool to create a "
        "Salesforce Task when a meeting has been scheduled with the SDR"
    )

    def get_schema(self) -> type[BaseModel]:
        return SalesforceTaskInput

    async def execute(self, ctx: SessionContext, datetime: str = "", email: str = "", **kwargs) -> Outcome:
        self._log_arguments(datetime=datetime, email=email)
        try:
            meeting_time = utc_date(datetime)
        except ValueError:
            return Outcome.failure(f"Invalid meeting datetime: {datetime}")

        payload = {"email": email, "meeting_time": meeting_time}
        response = await self._gateway.attach_salesforce_task(payload, self._token(ctx))
        if succeeded(response):
            return Outcome.success("Salesforce Task created successfully")
        return Outcome.failure("Salesforce Task failed to be created")

"""
Tool that records an outbound email campaign with recipe recommendations.

Nothing is delivered; the campaign record stands in for the send.
"""
import logging

from cms_agent.domains.agents import ToolContext
from cms_agent.domains.records import TextFormat
from cms_agent.domains.tools import ParameterType, ToolParameter, ToolResult, ToolSchema
from cms_agent.plugins.tools.fields import formatted_text
from cms_agent.plugins.tools.function_call import FunctionCallTool

logger = logging.getLogger(__name__)

CREATE_EMAIL_CAMPAIGN_SCHEMA = ToolSchema(
    id="ai_agent:create_email_campaign",
    function_name="create_email_campaign",
    label="Create Email Campaign",
    description=(
        "This tool can be used to send emails to all subscribed users "
        "with recipe recommendations"
    ),
    parameters=[
        ToolParameter(
            name="subject",
            type=ParameterType.STRING,
            label="Email subject",
            description="A catchy subject for the mail.",
            required=True,
        ),
        ToolParameter(
            name="mail_body",
            type=ParameterType.STRING,
            label="Email body",
            description=(
                "The HTML markup that corresponds to the mail body of the "
                "campaign with recipe recommendations."
            ),
        ),
    ],
)


class CreateEmailCampaign(FunctionCallTool):
    schema = CREATE_EMAIL_CAMPAIGN_SCHEMA

    async def execute(self, context: ToolContext, **params) -> ToolResult:
        subject = params["subject"].strip()
        fields = {
            "title": subject,
            "uid": context.user_id,
            "langcode": context.langcode,
        }
        if params.get("mail_body"):
            fields["field_email_body"] = formatted_text(
                params["mail_body"], TextFormat.FULL_HTML
            )

        record = context.records.create("email_campaign", fields)
        record = await context.records.save(record)
        logger.info(f"Created email campaign {record.id}: {subject}")

        return self.success(
            f'Mail with subject "{subject}" sent successfully',
            payload={"node_id": record.id},
        )

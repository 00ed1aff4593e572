"""Read-only catalog of pre-built workflow templates."""

from __future__ import annotations

from collections.abc import Iterable

from .models import WorkflowTemplate

_TEMPLATE_DATA: list[dict[str, object]] = [
    {
        "id": "template_deal_won_followup",
        "name": "Deal Won Follow-up",
        "description": (
            "Automatically schedule a thank you call and send a welcome email when a deal is won"
        ),
        "category": "Deal Management",
        "trigger": {"type": "deal_won"},
        "actions": [
            {
                "type": "send_email",
                "config": {
                    "emailTemplate": "deal_won_welcome",
                    "subject": "Thank you for your business!",
                },
            },
            {
                "type": "schedule_activity",
                "config": {
                    "activityType": "call",
                    "subject": "Thank you call",
                    "description": "Call customer to thank them and ensure smooth onboarding",
                    "dueDate": 2,
                },
            },
            {
                "type": "update_field",
                "config": {"fieldName": "customer_status", "fieldValue": "active"},
            },
        ],
        "tags": ["deal", "won", "follow-up", "onboarding"],
    },
    {
        "id": "template_stage_progression",
        "name": "Deal Stage Progression",
        "description": (
            "Automatically schedule follow-up activities when a deal moves to a new stage"
        ),
        "category": "Deal Management",
        "trigger": {"type": "deal_stage_changed"},
        "actions": [
            {
                "type": "schedule_activity",
                "config": {
                    "activityType": "follow_up",
                    "subject": "Follow up on deal progression",
                    "description": "Check in with customer about next steps",
                    "dueDate": 3,
                },
            },
            {
                "type": "send_notification",
                "config": {
                    "notificationMessage": "Deal has moved to a new stage. Review and take action."
                },
            },
        ],
        "tags": ["deal", "stage", "follow-up"],
    },
    {
        "id": "template_new_lead_assignment",
        "name": "New Lead Auto-Assignment",
        "description": "Automatically assign new leads to sales reps and schedule first contact",
        "category": "Lead Management",
        "trigger": {
            "type": "contact_created",
            "conditions": [{"field": "type", "operator": "equals", "value": "lead"}],
        },
        "actions": [
            {"type": "assign_owner", "config": {"assignTo": "round_robin"}},
            {
                "type": "schedule_activity",
                "config": {
                    "activityType": "call",
                    "subject": "Initial lead contact",
                    "description": "Reach out to new lead within 24 hours",
                    "dueDate": 1,
                },
            },
            {
                "type": "send_email",
                "config": {"emailTemplate": "new_lead_intro", "subject": "Welcome! Let's connect"},
            },
        ],
        "tags": ["lead", "assignment", "first-contact"],
    },
    {
        "id": "template_stale_deal_alert",
        "name": "Stale Deal Alert",
        "description": (
            "Send alerts and schedule follow-ups for deals that haven't been updated recently"
        ),
        "category": "Deal Management",
        "trigger": {
            "type": "time_based",
            "conditions": [
                {"field": "days_since_update", "operator": "greater_than", "value": 14},
                {"field": "stage", "operator": "not_equals", "value": "won"},
                {"field": "stage", "operator": "not_equals", "value": "lost"},
            ],
        },
        "actions": [
            {
                "type": "send_notification",
                "config": {
                    "notificationMessage": (
                        "This deal has not been updated in 14 days. Please review and update."
                    )
                },
            },
            {
                "type": "schedule_activity",
                "config": {
                    "activityType": "follow_up",
                    "subject": "Re-engage with stale deal",
                    "description": "Contact customer to move deal forward or close",
                    "dueDate": 1,
                },
            },
            {"type": "update_field", "config": {"fieldName": "priority", "fieldValue": "high"}},
        ],
        "tags": ["deal", "stale", "alert", "priority"],
    },
    {
        "id": "template_proposal_sent",
        "name": "Proposal Sent Follow-up",
        "description": "Automatically schedule follow-up activities after sending a proposal",
        "category": "Sales Process",
        "trigger": {
            "type": "deal_stage_changed",
            "conditions": [{"field": "newStage", "operator": "equals", "value": "proposal_sent"}],
        },
        "actions": [
            {
                "type": "schedule_activity",
                "config": {
                    "activityType": "call",
                    "subject": "Proposal follow-up call",
                    "description": (
                        "Check if customer received proposal and answer any questions"
                    ),
                    "dueDate": 2,
                },
            },
            {
                "type": "schedule_activity",
                "config": {
                    "activityType": "email",
                    "subject": "Proposal check-in email",
                    "description": (
                        "Send email checking if there are any questions about the proposal"
                    ),
                    "dueDate": 5,
                },
            },
            {
                "type": "send_notification",
                "config": {"notificationMessage": "Proposal sent. Follow-up activities scheduled."},
            },
        ],
        "tags": ["proposal", "follow-up", "sales"],
    },
    {
        "id": "template_meeting_scheduled",
        "name": "Meeting Preparation",
        "description": "Prepare for upcoming meetings by creating tasks and sending reminders",
        "category": "Activity Management",
        "trigger": {
            "type": "activity_completed",
            "conditions": [
                {"field": "activityType", "operator": "equals", "value": "meeting_scheduled"}
            ],
        },
        "actions": [
            {
                "type": "create_task",
                "config": {
                    "subject": "Prepare meeting agenda",
                    "description": "Review customer history and prepare meeting agenda",
                    "dueDate": 1,
                },
            },
            {
                "type": "create_task",
                "config": {
                    "subject": "Research customer background",
                    "description": "Research customer's company, industry, and recent news",
                    "dueDate": 1,
                },
            },
            {
                "type": "send_email",
                "config": {
                    "emailTemplate": "meeting_confirmation",
                    "subject": "Looking forward to our meeting",
                },
            },
        ],
        "tags": ["meeting", "preparation", "tasks"],
    },
    {
        "id": "template_lost_deal_analysis",
        "name": "Lost Deal Analysis",
        "description": "Capture feedback and schedule analysis when a deal is lost",
        "category": "Deal Management",
        "trigger": {"type": "deal_lost"},
        "actions": [
            {
                "type": "create_task",
                "config": {
                    "subject": "Document loss reason",
                    "description": "Document why the deal was lost and any lessons learned",
                    "dueDate": 0,
                },
            },
            {
                "type": "schedule_activity",
                "config": {
                    "activityType": "follow_up",
                    "subject": "Future opportunity check-in",
                    "description": "Check in with prospect about future opportunities",
                    "dueDate": 90,
                },
            },
            {
                "type": "update_field",
                "config": {"fieldName": "follow_up_date", "fieldValue": 90},
            },
        ],
        "tags": ["deal", "lost", "analysis", "future"],
    },
    {
        "id": "template_high_value_deal",
        "name": "High-Value Deal Monitoring",
        "description": "Special handling and notifications for high-value deals",
        "category": "Deal Management",
        "trigger": {
            "type": "deal_created",
            "conditions": [{"field": "value", "operator": "greater_than", "value": 50000}],
        },
        "actions": [
            {
                "type": "send_notification",
                "config": {"notificationMessage": "High-value deal created! Review and prioritize."},
            },
            {"type": "update_field", "config": {"fieldName": "priority", "fieldValue": "high"}},
            {
                "type": "schedule_activity",
                "config": {
                    "activityType": "meeting",
                    "subject": "High-value deal strategy meeting",
                    "description": "Plan approach for this high-value opportunity",
                    "dueDate": 1,
                },
            },
            {
                "type": "webhook",
                "config": {"webhookUrl": "/api/notifications/high-value-deal"},
            },
        ],
        "tags": ["deal", "high-value", "priority", "monitoring"],
    },
]

WORKFLOW_TEMPLATES: tuple[WorkflowTemplate, ...] = tuple(
    WorkflowTemplate.model_validate(item) for item in _TEMPLATE_DATA
)


class TemplateCatalog:
    """Query surface over a fixed set of templates."""

    def __init__(self, templates: Iterable[WorkflowTemplate] = WORKFLOW_TEMPLATES) -> None:
        self._templates = tuple(templates)

    def list(self) -> list[WorkflowTemplate]:
        return list(self._templates)

    def get(self, template_id: str) -> WorkflowTemplate | None:
        for template in self._templates:
            if template.id == template_id:
                return template
        return None

    def by_category(self, category: str) -> list[WorkflowTemplate]:
        return [t for t in self._templates if t.category == category]

    def search_by_tag(self, tag: str) -> list[WorkflowTemplate]:
        needle = tag.lower()
        return [t for t in self._templates if any(needle in x.lower() for x in t.tags)]

    def categories(self) -> list[str]:
        return list(dict.fromkeys(t.category for t in self._templates))

"""
eventhub/gemini.py
------------------
Google Gemini helpers for the organizer tools.

Responsibilities:
    - Suggest a planning board (tasks with subtasks) for an event.
    - Write a post-event report from the event's metrics.

Both helpers degrade gracefully: if the API key is missing or the model
answers with something that is not the expected JSON, a fixed fallback is
returned and the failure is logged.
"""

import json
import logging
import time

import google.generativeai as genai
from django.conf import settings

logger = logging.getLogger(__name__)

COLUMNS = ("planning", "developing", "reviewing", "finished")
PRIORITIES = ("high", "medium", "low")

_model = None


class GeminiUnavailable(Exception):
    pass


def _get_model():
    global _model
    if _model is None:
        if not settings.GEMINI_API_KEY:
            raise GeminiUnavailable("GEMINI_API_KEY is not configured")
        genai.configure(api_key=settings.GEMINI_API_KEY)
        _model = genai.GenerativeModel(settings.GEMINI_MODEL)
    return _model


def _strip_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        raw = raw.split("\n", 1)[1] if "\n" in raw else raw[3:]
    if raw.endswith("```"):
        raw = raw[:-3]
    return raw.strip()


def generate_json(prompt: str, temperature: float = 0.4) -> dict:
    """Send ``prompt`` and parse the JSON answer. Raises on any failure."""
    response = _get_model().generate_content(
        prompt,
        generation_config=genai.GenerationConfig(
            temperature=temperature,
            response_mime_type="application/json",
        ),
    )
    return json.loads(_strip_fences(response.text))


# ── Planning board ─────────────────────────────────────────

_TASKS_PROMPT = """You are an expert event planner. Generate a task list for organizing the event below.

Event Information:
- Title: {title}
- Category: {category}
- Description: {description}
- Is Sub-Event: {is_sub}
- Venue: {venue}
- Capacity: {capacity}
- Pricing: {pricing}
- Dates: {dates}

Cover planning, development, review and day-of execution. Each task must be
specific and actionable, carry a realistic time estimate and have 2-4 subtasks.

Columns: "planning", "developing", "reviewing", "finished".
Priorities: "high" for critical path items, "medium" for important but flexible
items, "low" for nice-to-have items.

Generate {count} tasks in total.

Return only JSON with this exact structure:
{{"tasks": [{{"content": "string", "column": "planning|developing|reviewing|finished",
"priority": "high|medium|low", "estimatedDuration": "string",
"subtasks": [{{"content": "string"}}]}}]}}
"""


def _task(base, n, content, column, priority, duration, subtasks):
    return {
        "id": f"fallback_{base}_{n}",
        "content": content,
        "column": column,
        "priority": priority,
        "estimated_duration": duration,
        "completed": False,
        "subtasks": [
            {"id": f"fallback_sub_{base}_{n}_{i}", "content": s, "completed": False}
            for i, s in enumerate(subtasks, start=1)
        ],
    }


def fallback_tasks(is_sub_event=False):
    base = int(time.time() * 1000)
    if is_sub_event:
        return [
            _task(base, 1, "Coordinate with main event team", "planning", "high", "1 hour",
                  ["Review main event timeline", "Align sub-event objectives", "Confirm resource allocation"]),
            _task(base, 2, "Prepare sub-event specific content", "planning", "high", "3 hours",
                  ["Develop content outline", "Prepare materials and resources", "Create participant guidelines"]),
            _task(base, 3, "Setup sub-event logistics", "developing", "medium", "2 hours",
                  ["Arrange specific equipment needs", "Setup dedicated space/area", "Test integration with main event"]),
            _task(base, 4, "Final coordination check", "reviewing", "high", "1 hour",
                  ["Confirm timing with main event", "Brief team on sub-event flow"]),
        ]
    return [
        _task(base, 1, "Define event objectives and scope", "planning", "high", "2 hours",
              ["Set clear goals and success metrics", "Define target audience", "Create event timeline"]),
        _task(base, 2, "Venue selection and booking", "planning", "high", "1 day",
              ["Research suitable venues", "Visit and evaluate options", "Negotiate and book venue"]),
        _task(base, 3, "Setup event infrastructure", "developing", "high", "4 hours",
              ["Arrange seating and layout", "Test audio-visual equipment", "Setup registration area"]),
        _task(base, 4, "Final quality check", "reviewing", "medium", "2 hours",
              ["Review all arrangements", "Conduct rehearsal if needed"]),
    ]


def _normalize_tasks(raw_tasks):
    base = int(time.time() * 1000)
    tasks = []
    for index, item in enumerate(raw_tasks):
        content = str(item.get("content") or "").strip()
        if not content:
            continue
        column = item.get("column") if item.get("column") in COLUMNS else "planning"
        priority = item.get("priority") if item.get("priority") in PRIORITIES else "medium"
        tasks.append({
            "id": f"task_{base}_{index}",
            "content": content[:500],
            "column": column,
            "priority": priority,
            "estimated_duration": str(item.get("estimatedDuration") or item.get("estimated_duration") or "")[:50],
            "completed": False,
            "subtasks": [
                {"id": f"subtask_{base}_{index}_{sub_index}", "content": str(sub["content"]).strip()[:500], "completed": False}
                for sub_index, sub in enumerate(item.get("subtasks") or [])
                if isinstance(sub, dict) and str(sub.get("content") or "").strip()
            ],
        })
    return tasks


def generate_event_tasks(event) -> list:
    """
    Suggest a planning board for ``event``.

    Returns:
        A list of task dicts (id, content, column, priority,
        estimated_duration, completed, subtasks). Never raises.
    """
    is_sub = bool(event.parent_event_id)
    prompt = _TASKS_PROMPT.format(
        title=event.title,
        category=event.category.name if event.category_id else "General",
        description=event.description or "No description provided",
        is_sub="Yes" if is_sub else "No",
        venue="Online Event" if event.is_online else (event.location or "TBD"),
        capacity=event.total_capacity or "Unlimited",
        pricing="Free Event" if event.is_free else f"Paid Event (${event.price})",
        dates=f"{event.start_at:%a %b %d %Y} to {event.end_at:%a %b %d %Y}",
        count="6-8" if is_sub else "8-12",
    )
    try:
        data = generate_json(prompt)
        tasks = _normalize_tasks(data.get("tasks") or [])
        if not tasks:
            raise ValueError("model returned no tasks")
        logger.info("Gemini suggested %s task(s) for event %s", len(tasks), event.pk)
        return tasks
    except Exception as exc:
        logger.warning("Task generation failed for event %s, using fallback: %s", event.pk, exc)
        return fallback_tasks(is_sub_event=is_sub)


# ── Reports ────────────────────────────────────────────────

_REPORT_PROMPT = """Analyze the following event data and write a professional post-event report.

Return only JSON with this exact schema:
{{"title": "string", "sections": [{{"heading": "string", "content": ["string", ...]}}]}}
Do not include any markdown in the JSON values.

EVENT DATA
- Title: {title}
- Category: {category}
- Description: {description}
- Format: {format}
- Dates: {dates}
- Organizer: {organizer}

ATTENDANCE
- Capacity: {capacity}
- Tickets sold: {tickets_sold}
- Checked in: {checked_in}
- Attendance rate: {attendance_rate}%

FINANCES
- Ticket revenue: {revenue}
- Planned budget: {budget}
- Actual expenditure: {expenditure}
- Sponsorship: {sponsorship}
- Net profit/loss: {profit}
- Budget variance: {variance}%

FEEDBACK
- Responses: {feedback_count}
- Average satisfaction: {satisfaction}
- NPS: {nps}

ORGANIZER NOTES
- Prepared by: {prepared_by}
- Key highlights: {highlights}
- Major outcomes: {outcomes}

Write these sections: "Executive Summary", "Event Performance Analysis",
"Financial Summary & ROI", "Key Achievements & Outcomes",
"Recommendations & Future Improvements". Use specific numbers.
"""


def fallback_report(report, metrics) -> dict:
    event = report.event
    return {
        "title": f"Post-Event Report: {event.title}",
        "sections": [
            {
                "heading": "Executive Summary",
                "content": [
                    f"{event.title} sold {metrics['tickets_sold']} ticket(s) with {metrics['checked_in']} check-in(s).",
                    f"Attendance rate: {metrics['attendance_rate']}%.",
                ],
            },
            {
                "heading": "Financial Summary & ROI",
                "content": [
                    f"Ticket revenue: {metrics['revenue']}",
                    f"Sponsorship: {metrics['sponsorship']}",
                    f"Actual expenditure: {metrics['actual_expenditure']}",
                    f"Net profit/loss: {metrics['profit']}",
                    f"Budget variance: {metrics['budget_variance_percent']}%",
                ],
            },
            {
                "heading": "Key Achievements & Outcomes",
                "content": [s for s in (report.key_highlights, report.major_outcomes) if s] or ["Not provided"],
            },
            {
                "heading": "Feedback",
                "content": [
                    f"Responses: {metrics['feedback']['total_responses']}",
                    f"Average satisfaction: {metrics['feedback']['averages']['overall_satisfaction']}",
                    f"NPS: {metrics['feedback']['nps']}",
                ],
            },
        ],
    }


def _clean_sections(sections):
    """Raise ValueError unless every section is ``{"heading": str, "content": str | [str]}``."""
    if not isinstance(sections, list) or not sections:
        raise ValueError("missing sections")
    cleaned = []
    for section in sections:
        if not isinstance(section, dict) or not isinstance(section.get("heading"), str):
            raise ValueError(f"malformed section: {section!r:.80}")
        content = section.get("content")
        if isinstance(content, str):
            content = [content]
        if not isinstance(content, list) or not all(isinstance(item, str) for item in content):
            raise ValueError(f"malformed content in section {section['heading']!r}")
        cleaned.append({"heading": section["heading"], "content": content})
    return cleaned


def generate_report_content(report, metrics) -> dict:
    """Return ``{"title", "sections"}`` for ``report``. Never raises."""
    event = report.event
    feedback = metrics["feedback"]
    prompt = _REPORT_PROMPT.format(
        title=event.title,
        category=event.category.name if event.category_id else "N/A",
        description=event.description or "N/A",
        format="Virtual/Online Event" if event.is_online else f"Physical Event at {event.location or 'N/A'}",
        dates=f"{event.start_at:%Y-%m-%d} to {event.end_at:%Y-%m-%d}",
        organizer=event.organizer.get_full_name() or event.organizer.email,
        capacity=event.total_capacity or "Unlimited",
        tickets_sold=metrics["tickets_sold"],
        checked_in=metrics["checked_in"],
        attendance_rate=metrics["attendance_rate"],
        revenue=metrics["revenue"],
        budget=metrics["budget"],
        expenditure=metrics["actual_expenditure"],
        sponsorship=metrics["sponsorship"],
        profit=metrics["profit"],
        variance=metrics["budget_variance_percent"],
        feedback_count=feedback["total_responses"],
        satisfaction=feedback["averages"]["overall_satisfaction"],
        nps=feedback["nps"],
        prepared_by=report.prepared_by,
        highlights=report.key_highlights or "N/A",
        outcomes=report.major_outcomes or "N/A",
    )
    try:
        data = generate_json(prompt)
        sections = _clean_sections(data.get("sections"))
        return {"title": str(data.get("title") or f"Post-Event Report: {event.title}"), "sections": sections}
    except Exception as exc:
        logger.warning("Report generation failed for event %s, using fallback: %s", event.pk, exc)
        return fallback_report(report, metrics)

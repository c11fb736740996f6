# eventhub/analytics.py
"""
Aggregations behind the organizer dashboards: feedback, issues, stakeholders,
event updates and report metrics.
"""

from decimal import Decimal

from django.db.models import Avg, Count, F, Sum

from .models import EventUpdate, FeedbackResponse, Issue, Order, Stakeholder, Ticket


def _round(value, digits=2):
    return round(float(value), digits) if value is not None else 0


def feedback_analytics(event):
    responses = FeedbackResponse.objects.filter(event=event)
    total = responses.count()
    orders = Order.objects.filter(event=event, status=Order.COMPLETED).count()

    empty_averages = {
        "overall_satisfaction": 0,
        "content_quality": 0,
        "organization_rating": 0,
        "venue_rating": 0,
        "recommendation_score": 0,
    }
    if total == 0:
        return {
            "total_responses": 0,
            "response_rate": 0,
            "averages": empty_averages,
            "nps": 0,
            "distribution": {str(n): 0 for n in range(1, 6)},
        }

    agg = responses.aggregate(
        overall_satisfaction=Avg("overall_satisfaction"),
        content_quality=Avg("content_quality"),
        organization_rating=Avg("organization_rating"),
        recommendation_score=Avg("recommendation_score"),
    )
    # Avg skips NULLs, so venue is averaged over the responses that rated it
    venue = responses.aggregate(v=Avg("venue_rating"))["v"]

    promoters = responses.filter(recommendation_score__gte=9).count()
    detractors = responses.filter(recommendation_score__lte=6).count()

    distribution = {str(n): 0 for n in range(1, 6)}
    for row in responses.values("overall_satisfaction").annotate(n=Count("id")):
        distribution[str(row["overall_satisfaction"])] = row["n"]

    averages = {key: _round(value) for key, value in agg.items()}
    averages["venue_rating"] = _round(venue) if venue is not None else None

    return {
        "total_responses": total,
        "response_rate": _round(total / orders * 100) if orders else 0,
        "averages": averages,
        "nps": round((promoters - detractors) / total * 100),
        "distribution": distribution,
    }


def issue_analytics(issues):
    """Counts by status/severity/category, resolution rate and mean hours to resolve."""
    total = issues.count()
    by_status = {key: 0 for key, _ in Issue.STATUS_CHOICES}
    by_severity = {key: 0 for key, _ in Issue.SEVERITY_CHOICES}
    by_category = {key: 0 for key, _ in Issue.CATEGORY_CHOICES}

    for row in issues.values("status").annotate(n=Count("id")):
        by_status[row["status"]] = row["n"]
    for row in issues.values("severity").annotate(n=Count("id")):
        by_severity[row["severity"]] = row["n"]
    for row in issues.values("category").annotate(n=Count("id")):
        by_category[row["category"]] = row["n"]

    resolved = issues.filter(resolved_at__isnull=False)
    durations = [
        (r.resolved_at - r.created_at).total_seconds() / 3600
        for r in resolved.only("created_at", "resolved_at")
    ]
    done = by_status[Issue.RESOLVED] + by_status[Issue.CLOSED]

    return {
        "total": total,
        "by_status": by_status,
        "by_severity": by_severity,
        "by_category": by_category,
        "resolution_rate": _round(done / total * 100) if total else 0,
        "average_resolution_hours": _round(sum(durations) / len(durations)) if durations else 0,
    }


def stakeholder_stats(event):
    qs = Stakeholder.objects.filter(event=event)
    counts = {row["attendance_status"]: row["n"] for row in qs.values("attendance_status").annotate(n=Count("id"))}
    return {
        "total": qs.count(),
        "certificatesGenerated": qs.filter(certificate_generated=True).count(),
        "attended": counts.get(Stakeholder.ATTENDED, 0),
        "noShow": counts.get(Stakeholder.NO_SHOW, 0),
        "registered": counts.get(Stakeholder.REGISTERED, 0),
        "cancelled": counts.get(Stakeholder.CANCELLED, 0),
        "byRole": {row["role"]: row["n"] for row in qs.values("role").annotate(n=Count("id"))},
    }


def update_stats(event):
    qs = EventUpdate.objects.filter(event=event)
    email_totals = {"sent": 0, "delivered": 0, "opened": 0, "clicked": 0}
    for stats in qs.values_list("email_stats", flat=True):
        for key in email_totals:
            email_totals[key] += int((stats or {}).get(key, 0))
    return {
        "total": qs.count(),
        "by_status": {row["status"]: row["n"] for row in qs.values("status").annotate(n=Count("id"))},
        "by_type": {row["update_type"]: row["n"] for row in qs.values("update_type").annotate(n=Count("id"))},
        "email": email_totals,
    }


def report_metrics(report):
    event = report.event
    tickets = Ticket.objects.filter(event=event)
    sold = tickets.exclude(status=Ticket.CANCELLED).count()
    checked_in = tickets.filter(status=Ticket.USED).count()
    revenue = (
        Order.objects.filter(event=event, status=Order.COMPLETED).aggregate(total=Sum("total_amount"))["total"]
        or Decimal("0")
    )
    budget = report.budget or Decimal("0")
    sponsorship = report.sponsorship or Decimal("0")
    expenditure = report.actual_expenditure or Decimal("0")
    profit = revenue + sponsorship - expenditure

    attendance_rate = _round(sold / event.total_capacity * 100, 1) if event.total_capacity else 0
    variance = _round((expenditure - budget) / budget * 100, 1) if budget and expenditure else 0

    return {
        "tickets_sold": sold,
        "checked_in": checked_in,
        "attendance_rate": attendance_rate,
        "revenue": str(revenue),
        "budget": str(budget),
        "sponsorship": str(sponsorship),
        "actual_expenditure": str(expenditure),
        "total_income": str(revenue + sponsorship),
        "profit": str(profit),
        "is_profit": profit >= 0,
        "budget_variance_percent": variance,
        "over_budget": expenditure > budget,
        "feedback": feedback_analytics(event),
    }


def increment(model, pk, field, by=1):
    """Atomically bump a counter column."""
    return model.objects.filter(pk=pk).update(**{field: F(field) + by})

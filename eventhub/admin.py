# eventhub/admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import (
    User,
    Category,
    Tag,
    Event,
    Order,
    Ticket,
    Stakeholder,
    StakeholderImport,
    CertificateTemplate,
    Certificate,
    Gallery,
    Photo,
    FeedbackTemplate,
    FeedbackResponse,
    Issue,
    EventUpdate,
    Report,
    EmailLog,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = (
        "email",
        "first_name",
        "last_name",
        "role",
        "is_active",
        "is_staff",
        "created_at",
    )
    list_filter = ("role", "is_active", "is_staff")
    ordering = ("-created_at",)
    search_fields = ("email", "first_name", "last_name", "student_id")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (
            "Personal info",
            {
                "fields": (
                    "first_name",
                    "last_name",
                    "student_id",
                    "phone_number",
                    "date_of_birth",
                    "profile_picture",
                )
            },
        ),
        (
            "Permissions",
            {"fields": ("role", "is_verified", "is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        ("Important dates", {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "first_name", "last_name", "role", "password1", "password2"),
            },
        ),
    )

    readonly_fields = ("created_at", "updated_at", "date_joined", "last_login")


admin.site.register(Category)
admin.site.register(Tag)


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("title", "organizer", "event_type", "start_at", "total_capacity", "tickets_left", "status")
    list_filter = ("status", "event_type", "category", "is_free")
    search_fields = ("title", "description", "location")
    readonly_fields = ("stats",)

    def stats(self, obj):
        if obj.is_unlimited:
            return f"Sold: {obj.tickets_sold} (unlimited)"
        return f"Sold: {obj.tickets_sold}, left: {obj.tickets_left}"


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "event", "sub_event", "buyer", "total_tickets", "total_amount", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("payment_reference", "buyer__email", "event__title")


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ("ticket_id", "entry_code", "event", "user", "status", "issued_at")
    list_filter = ("status", "event", "issued_at")
    search_fields = ("ticket_id", "entry_code", "user__email", "event__title")
    readonly_fields = ("ticket_id", "entry_code", "qr_code_data", "issued_at", "verified_at")

    fieldsets = (
        (None, {"fields": ("ticket_id", "entry_code", "order", "event", "user", "status")}),
        ("QR Code", {"fields": ("qr_code", "qr_code_data")}),
        ("Timestamps", {"fields": ("issued_at", "verified_at", "verified_by", "expires_at")}),
        ("Additional", {"fields": ("metadata",)}),
    )


@admin.register(Stakeholder)
class StakeholderAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "event", "role", "attendance_status", "certificate_generated")
    list_filter = ("role", "attendance_status", "certificate_generated")
    search_fields = ("name", "email", "event__title")


@admin.register(StakeholderImport)
class StakeholderImportAdmin(admin.ModelAdmin):
    list_display = ("file_name", "event", "status", "successful_imports", "failed_imports", "created_at")
    list_filter = ("status",)


@admin.register(CertificateTemplate)
class CertificateTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "event", "template_type", "is_active")
    list_filter = ("template_type", "is_active")


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ("stakeholder", "event", "template", "generated_at", "email_sent", "download_count")
    list_filter = ("email_sent",)


@admin.register(Gallery)
class GalleryAdmin(admin.ModelAdmin):
    list_display = ("name", "event", "visibility", "shareable_link", "view_count")
    list_filter = ("visibility",)
    search_fields = ("name", "shareable_link")
    exclude = ("access_password",)


@admin.register(Photo)
class PhotoAdmin(admin.ModelAdmin):
    list_display = ("original_name", "gallery", "uploaded_by", "like_count", "uploaded_at")


admin.site.register(FeedbackTemplate)


@admin.register(FeedbackResponse)
class FeedbackResponseAdmin(admin.ModelAdmin):
    list_display = ("event", "overall_satisfaction", "recommendation_score", "is_anonymous", "submitted_at")


@admin.register(Issue)
class IssueAdmin(admin.ModelAdmin):
    list_display = ("title", "event", "category", "severity", "status", "created_at")
    list_filter = ("status", "severity", "category")
    search_fields = ("title", "description", "reporter_email")


@admin.register(EventUpdate)
class EventUpdateAdmin(admin.ModelAdmin):
    list_display = ("title", "event", "update_type", "priority", "status", "published_at")
    list_filter = ("status", "update_type", "priority")


admin.site.register(Report)


@admin.register(EmailLog)
class EmailLogAdmin(admin.ModelAdmin):
    list_display = ("to", "subject", "status", "created_at", "sent_at", "user", "event_id", "ticket_id")
    list_filter = ("status",)
    search_fields = ("to", "subject", "last_error", "send_key")
    readonly_fields = ("created_at", "sent_at")

# eventhub/models.py
import io
import json
import os
import secrets
import string
import uuid
from datetime import timedelta

import qrcode
from PIL import Image
from django.contrib.auth.base_user import BaseUserManager
from django.contrib.auth.models import AbstractUser
from django.core.files.base import ContentFile
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.conf import settings


class CustomUserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("The Email field must be set")
        email = self.normalize_email(email)
        extra_fields.setdefault("username", email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", "admin")
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    ROLE_STUDENT = "student"
    ROLE_ORGANIZER = "organizer"
    ROLE_ADMIN = "admin"

    ROLE_CHOICES = [
        (ROLE_STUDENT, "Student"),
        (ROLE_ORGANIZER, "Organizer"),
        (ROLE_ADMIN, "Administrator"),
    ]

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_STUDENT)
    student_id = models.CharField(max_length=20, blank=True)
    phone_number = models.CharField(max_length=20, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    profile_picture = models.ImageField(upload_to="profiles/", null=True, blank=True)
    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name"]

    objects = CustomUserManager()

    def __str__(self):
        full = f"{self.first_name} {self.last_name}".strip()
        return f"{full} ({self.email})" if full else self.email

    def is_student(self):
        return self.role == self.ROLE_STUDENT

    def is_organizer(self):
        return self.role == self.ROLE_ORGANIZER

    def is_admin(self):
        return self.role == self.ROLE_ADMIN


class NamedLookupMixin:
    """Case-insensitive get-or-create by name, shared by categories and tags."""

    @classmethod
    def get_or_create_by_name(cls, name):
        name = (name or "").strip()
        if not name:
            return None
        existing = cls.objects.filter(name__iexact=name).first()
        if existing:
            return existing
        return cls.objects.create(name=name)


class Category(NamedLookupMixin, models.Model):
    name = models.CharField(max_length=80, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name


class Tag(NamedLookupMixin, models.Model):
    name = models.CharField(max_length=60, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Event(models.Model):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (DRAFT, "Draft"),
        (PUBLISHED, "Published"),
        (CANCELLED, "Cancelled"),
    ]

    MAIN = "main"
    SUB = "sub"

    TYPE_CHOICES = [
        (MAIN, "Main event"),
        (SUB, "Sub-event"),
    ]

    # tickets_left sentinel for events without a capacity limit
    UNLIMITED = -1

    title = models.CharField(max_length=160)
    description = models.TextField(blank=True)
    image = models.ImageField(upload_to="events/", null=True, blank=True)
    image_url = models.URLField(blank=True)
    is_online = models.BooleanField(default=False)
    location = models.CharField(max_length=160, blank=True)
    landmark = models.CharField(max_length=160, blank=True)
    campus_location = models.CharField(max_length=160, blank=True)
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    duration = models.CharField(max_length=50, blank=True)
    total_capacity = models.PositiveIntegerField(default=0)
    tickets_left = models.IntegerField(default=UNLIMITED)
    sold_out = models.BooleanField(default=False)
    is_free = models.BooleanField(default=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    category = models.ForeignKey(
        Category, null=True, blank=True, on_delete=models.SET_NULL, related_name="events"
    )
    tags = models.ManyToManyField(Tag, blank=True, related_name="events")
    organizer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="organized_events")
    age_restriction = models.PositiveSmallIntegerField(default=0)
    url = models.URLField(blank=True)
    parent_event = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.CASCADE, related_name="sub_events"
    )
    event_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=MAIN)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PUBLISHED)
    feedback_enabled = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    @property
    def is_unlimited(self):
        return self.tickets_left == self.UNLIMITED

    @property
    def capacity_event(self):
        """The event whose counters govern availability (the parent for sub-events)."""
        return self.parent_event if self.parent_event_id else self

    @property
    def tickets_sold(self):
        return self.tickets.exclude(status=Ticket.CANCELLED).count()

    @property
    def cover_url(self):
        if self.image:
            return self.image.url
        return self.image_url or None

    def recompute_capacity(self):
        """Derive tickets_left/sold_out from total_capacity and issued tickets."""
        if not self.total_capacity:
            self.tickets_left = self.UNLIMITED
            self.sold_out = False
        else:
            self.tickets_left = max(0, self.total_capacity - self.tickets_sold)
            self.sold_out = self.tickets_left == 0

    def is_managed_by(self, user):
        return bool(user and user.is_authenticated and (self.organizer_id == user.id or user.is_admin()))


class Order(models.Model):
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
    ]

    payment_reference = models.CharField(max_length=120, db_index=True)
    total_tickets = models.PositiveIntegerField(default=1)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="orders")
    sub_event = models.ForeignKey(
        Event, null=True, blank=True, on_delete=models.SET_NULL, related_name="sub_event_orders"
    )
    buyer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="orders")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=COMPLETED)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Order {self.pk} ({self.total_tickets} x {self.event.title})"


class Ticket(models.Model):
    """Entry credential with a six-digit entry code and a QR image."""

    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (ACTIVE, "Active"),
        (USED, "Used"),
        (EXPIRED, "Expired"),
        (CANCELLED, "Cancelled"),
    ]

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="tickets")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="tickets")

    ticket_id = models.CharField(max_length=50, unique=True, db_index=True)
    entry_code = models.CharField(max_length=6, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=ACTIVE)
    qr_code = models.ImageField(upload_to="qr_codes/", blank=True, null=True)
    qr_code_data = models.TextField(blank=True)
    issued_at = models.DateTimeField(auto_now_add=True)
    verified_at = models.DateTimeField(blank=True, null=True)
    verified_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="verified_tickets"
    )
    expires_at = models.DateTimeField(blank=True, null=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-issued_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "entry_code"], name="unique_entry_code_per_event"),
        ]

    def __str__(self):
        return f"Ticket {self.ticket_id} for {self.event.title}"

    def save(self, *args, **kwargs):
        if not self.ticket_id:
            self.ticket_id = f"TKT-{uuid.uuid4().hex[:12].upper()}"
        if not self.entry_code:
            self.entry_code = self.generate_entry_code(self.event)
        if not self.expires_at and self.event.end_at:
            self.expires_at = self.event.end_at + timedelta(days=1)
        if not self.qr_code_data:
            self.qr_code_data = self.generate_qr_data()
        if not self.qr_code:
            self.generate_qr_code()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_entry_code(event, attempts=50):
        for _ in range(attempts):
            code = str(100000 + secrets.randbelow(900000))
            if not Ticket.objects.filter(event=event, entry_code=code).exists():
                return code
        raise ValueError(f"Could not allocate a unique entry code for event {event.pk}")

    def generate_qr_data(self):
        data = {
            "ticket_id": self.ticket_id,
            "entry_code": self.entry_code,
            "event_id": self.event_id,
            "user_id": self.user_id,
            "event_title": self.event.title,
            "issued_at": self.issued_at.isoformat() if self.issued_at else timezone.now().isoformat(),
        }
        return json.dumps(data)

    def generate_qr_code(self):
        if not self.qr_code_data:
            return
        qr = qrcode.QRCode(version=1, box_size=10, border=4)
        qr.add_data(self.qr_code_data)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        self.qr_code.save(f"ticket_{self.ticket_id}.png", ContentFile(buf.getvalue()), save=False)

    def is_expired(self):
        return bool(self.expires_at and self.expires_at < timezone.now())

    def is_valid(self):
        return self.status == self.ACTIVE and not self.is_expired()

    def verify(self, verified_by=None):
        """
        Check the ticket in at the door.

        Returns a (success, message) tuple. An expired ticket is marked as
        such before being rejected. The active -> used transition is a
        conditional UPDATE, so a stale instance cannot admit a ticket twice.
        """
        rejection = self._rejection()
        if rejection:
            return False, rejection

        now = timezone.now()
        admitted = Ticket.objects.filter(pk=self.pk, status=self.ACTIVE).update(
            status=self.USED, verified_at=now, verified_by=verified_by
        )
        if not admitted:
            self.refresh_from_db(fields=["status", "verified_at", "verified_by"])
            return False, self._rejection() or "Ticket already verified"

        self.status = self.USED
        self.verified_at = now
        self.verified_by = verified_by
        return True, "Ticket verified successfully"

    def _rejection(self):
        if self.status == self.USED:
            return "Ticket already verified"
        if self.is_expired():
            Ticket.objects.filter(pk=self.pk).exclude(status=self.USED).update(status=self.EXPIRED)
            self.status = self.EXPIRED
            return "Ticket expired"
        if self.status == self.CANCELLED:
            return "Ticket cancelled"
        if self.status == self.EXPIRED:
            return "Ticket expired"
        return None

    def cancel_ticket(self):
        self.status = self.CANCELLED
        self.save(update_fields=["status"])

    @property
    def qr_code_url(self):
        if self.qr_code:
            return self.qr_code.url
        return None


class Stakeholder(models.Model):
    ROLE_ATTENDEE = "attendee"
    ROLE_SPEAKER = "speaker"
    ROLE_VOLUNTEER = "volunteer"
    ROLE_ORGANIZER = "organizer"
    ROLE_SPONSOR = "sponsor"

    ROLE_CHOICES = [
        (ROLE_ATTENDEE, "Attendee"),
        (ROLE_SPEAKER, "Speaker"),
        (ROLE_VOLUNTEER, "Volunteer"),
        (ROLE_ORGANIZER, "Organizer"),
        (ROLE_SPONSOR, "Sponsor"),
    ]

    REGISTERED = "registered"
    ATTENDED = "attended"
    NO_SHOW = "no-show"
    CANCELLED = "cancelled"

    ATTENDANCE_CHOICES = [
        (REGISTERED, "Registered"),
        (ATTENDED, "Attended"),
        (NO_SHOW, "No-show"),
        (CANCELLED, "Cancelled"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="stakeholders")
    name = models.CharField(max_length=160)
    email = models.EmailField()
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_ATTENDEE)
    attendance_status = models.CharField(max_length=20, choices=ATTENDANCE_CHOICES, default=REGISTERED)
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name="stakeholder_roles")
    # company, title, phone, notes
    additional_info = models.JSONField(default=dict, blank=True)
    certificate_generated = models.BooleanField(default=False)
    emails_sent = models.JSONField(default=dict, blank=True)
    imported_at = models.DateTimeField(null=True, blank=True)
    imported_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="imported_stakeholders"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "email"], name="unique_stakeholder_email_per_event"),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}> ({self.role})"

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        if self.user_id is None and self.email:
            self.user = User.objects.filter(email__iexact=self.email).first()
        super().save(*args, **kwargs)

    def mark_email_sent(self, kind):
        sent = dict(self.emails_sent or {})
        sent[kind] = True
        self.emails_sent = sent
        self.save(update_fields=["emails_sent", "updated_at"])


class StakeholderImport(models.Model):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    STATUS_CHOICES = [
        (PROCESSING, "Processing"),
        (COMPLETED, "Completed"),
        (FAILED, "Failed"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="stakeholder_imports")
    file = models.FileField(upload_to="imports/")
    file_name = models.CharField(max_length=255)
    total_records = models.PositiveIntegerField(default=0)
    successful_imports = models.PositiveIntegerField(default=0)
    failed_imports = models.PositiveIntegerField(default=0)
    # [{row, field, value, error}]
    errors = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PROCESSING)
    imported_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="stakeholder_imports")
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Import {self.file_name} [{self.status}]"


class CertificateTemplate(models.Model):
    PDF = "pdf"
    IMAGE = "image"
    GENERATED = "generated"

    TYPE_CHOICES = [
        (PDF, "PDF"),
        (IMAGE, "Image"),
        (GENERATED, "Generated"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="certificate_templates")
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    template_url = models.URLField(blank=True)
    template_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=GENERATED)
    # [{id, name, type, x, y, width, height, font_size, font_family, color, required}]
    fields = models.JSONField(default=list, blank=True)
    default_values = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="certificate_templates")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.event.title})"


class Certificate(models.Model):
    template = models.ForeignKey(CertificateTemplate, on_delete=models.PROTECT, related_name="certificates")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="certificates")
    stakeholder = models.OneToOneField(Stakeholder, on_delete=models.CASCADE, related_name="certificate")
    file = models.FileField(upload_to="certificates/", blank=True, null=True)
    field_values = models.JSONField(default=dict, blank=True)
    generated_at = models.DateTimeField(auto_now_add=True)
    email_sent = models.BooleanField(default=False)
    email_sent_at = models.DateTimeField(null=True, blank=True)
    download_count = models.PositiveIntegerField(default=0)
    last_download_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-generated_at"]

    def __str__(self):
        return f"Certificate for {self.stakeholder.name} ({self.event.title})"

    @property
    def file_url(self):
        if self.file:
            return self.file.url
        return None


def _share_token(length=12):
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


class Gallery(models.Model):
    PUBLIC = "public"
    PRIVATE = "private"
    RESTRICTED = "restricted"

    VISIBILITY_CHOICES = [
        (PUBLIC, "Public"),
        (PRIVATE, "Private"),
        (RESTRICTED, "Restricted"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="galleries")
    name = models.CharField(max_length=160)
    description = models.TextField(blank=True)
    cover_photo = models.URLField(blank=True)
    visibility = models.CharField(max_length=20, choices=VISIBILITY_CHOICES, default=PUBLIC)
    access_password = models.CharField(max_length=128, blank=True)
    allow_download = models.BooleanField(default=True)
    allow_comments = models.BooleanField(default=True)
    shareable_link = models.CharField(max_length=12, unique=True, default=_share_token)
    link_expiry = models.DateTimeField(null=True, blank=True)
    view_count = models.PositiveIntegerField(default=0)
    download_count = models.PositiveIntegerField(default=0)
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="galleries")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "galleries"

    def __str__(self):
        return self.name

    def link_expired(self):
        return bool(self.link_expiry and self.link_expiry < timezone.now())


class Photo(models.Model):
    THUMBNAIL_SIZE = (400, 400)

    gallery = models.ForeignKey(Gallery, on_delete=models.CASCADE, related_name="photos")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="photos")
    image = models.ImageField(upload_to="gallery/", null=True, blank=True)
    thumbnail = models.ImageField(upload_to="gallery/thumbs/", null=True, blank=True)
    file_url = models.URLField(blank=True)
    thumbnail_url = models.URLField(blank=True)
    original_name = models.CharField(max_length=255, blank=True)
    file_size = models.PositiveIntegerField(default=0)
    mime_type = models.CharField(max_length=60, blank=True)
    width = models.PositiveIntegerField(null=True, blank=True)
    height = models.PositiveIntegerField(null=True, blank=True)
    # caption, tags, location, photographer, camera, date_taken
    metadata = models.JSONField(default=dict, blank=True)
    visibility = models.CharField(max_length=20, choices=Gallery.VISIBILITY_CHOICES, default=Gallery.PUBLIC)
    view_count = models.PositiveIntegerField(default=0)
    download_count = models.PositiveIntegerField(default=0)
    like_count = models.PositiveIntegerField(default=0)
    uploaded_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="photos")
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-uploaded_at"]

    def __str__(self):
        return self.original_name or f"Photo {self.pk}"

    def save(self, *args, **kwargs):
        if self.image and not self.width:
            self.read_image_details()
        super().save(*args, **kwargs)

    def read_image_details(self):
        """Fill dimensions, size, mime type and a thumbnail from the uploaded file."""
        self.image.seek(0)
        with Image.open(self.image) as img:
            self.width, self.height = img.size
            self.mime_type = Image.MIME.get(img.format, "") or self.mime_type
            thumb = img.copy()
            thumb.thumbnail(self.THUMBNAIL_SIZE)
            if thumb.mode not in ("RGB", "L"):
                thumb = thumb.convert("RGB")
            buf = io.BytesIO()
            thumb.save(buf, format="JPEG")
        self.image.seek(0)
        self.file_size = self.image.size or 0
        if not self.original_name:
            self.original_name = os.path.basename(self.image.name)
        stem = os.path.splitext(os.path.basename(self.image.name))[0]
        self.thumbnail.save(f"{stem}_thumb.jpg", ContentFile(buf.getvalue()), save=False)

    @property
    def url(self):
        if self.image:
            return self.image.url
        return self.file_url or None

    @property
    def thumb_url(self):
        if self.thumbnail:
            return self.thumbnail.url
        return self.thumbnail_url or self.url


class GalleryAccess(models.Model):
    VIEW = "view"
    DOWNLOAD = "download"
    ADMIN = "admin"

    ACCESS_CHOICES = [
        (VIEW, "View"),
        (DOWNLOAD, "Download"),
        (ADMIN, "Admin"),
    ]

    gallery = models.ForeignKey(Gallery, on_delete=models.CASCADE, related_name="access_grants")
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.CASCADE, related_name="gallery_access")
    email = models.EmailField(blank=True)
    access_type = models.CharField(max_length=20, choices=ACCESS_CHOICES, default=VIEW)
    expires_at = models.DateTimeField(null=True, blank=True)
    granted_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="granted_gallery_access")
    granted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-granted_at"]

    def __str__(self):
        who = self.user.email if self.user_id else self.email
        return f"{who} → {self.gallery.name} ({self.access_type})"


class PhotoComment(models.Model):
    photo = models.ForeignKey(Photo, on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name="photo_comments")
    guest_name = models.CharField(max_length=120, blank=True)
    guest_email = models.EmailField(blank=True)
    content = models.TextField(max_length=1000)
    is_approved = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Comment on {self.photo} by {self.author_name}"

    @property
    def author_name(self):
        if self.user_id:
            return self.user.get_full_name() or self.user.email
        return self.guest_name or "Guest"


class FeedbackTemplate(models.Model):
    event = models.OneToOneField(Event, on_delete=models.CASCADE, related_name="feedback_template")
    # [{id, question, type, required, options}]
    custom_questions = models.JSONField(default=list, blank=True)
    feedback_hours = models.PositiveSmallIntegerField(
        default=2, validators=[MinValueValidator(1), MaxValueValidator(168)]
    )
    emails_sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Feedback form for {self.event.title}"


class FeedbackResponse(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="feedback_responses")
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name="feedback_responses")
    overall_satisfaction = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    content_quality = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    organization_rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    venue_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    recommendation_score = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(10)])
    liked_most = models.TextField(max_length=1000, blank=True)
    improvements = models.TextField(max_length=1000, blank=True)
    additional_comments = models.TextField(max_length=2000, blank=True)
    custom_answers = models.JSONField(default=list, blank=True)
    is_anonymous = models.BooleanField(default=False)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-submitted_at"]

    def __str__(self):
        return f"Feedback for {self.event.title} ({self.overall_satisfaction}/5)"


class Issue(models.Model):
    CATEGORY_CHOICES = [
        ("event-info", "Event information"),
        ("tickets-registration", "Tickets & registration"),
        ("event-experience", "Event experience"),
        ("payments", "Payments"),
        ("other", "Other"),
    ]

    SEVERITY_CHOICES = [
        ("low", "Low"),
        ("medium", "Medium"),
        ("high", "High"),
    ]

    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    STATUS_CHOICES = [
        (OPEN, "Open"),
        (IN_PROGRESS, "In progress"),
        (RESOLVED, "Resolved"),
        (CLOSED, "Closed"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="issues")
    event_title = models.CharField(max_length=160)
    reported_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="reported_issues")
    reporter_name = models.CharField(max_length=160)
    reporter_email = models.EmailField()
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES)
    subcategory = models.CharField(max_length=80, blank=True)
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES, default="medium")
    title = models.CharField(max_length=200)
    description = models.TextField()
    attachments = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=OPEN)
    organizer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="assigned_issues")
    organizer_email = models.EmailField()
    admin_notes = models.TextField(blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"[{self.severity}] {self.title}"


def default_delivery_methods():
    return {"email": True, "sms": False, "in_app": True, "push": False}


def default_email_stats():
    return {"sent": 0, "delivered": 0, "opened": 0, "clicked": 0}


class EventUpdate(models.Model):
    TYPE_CHOICES = [
        ("announcement", "Announcement"),
        ("schedule_change", "Schedule change"),
        ("location_change", "Location change"),
        ("cancellation", "Cancellation"),
        ("reminder", "Reminder"),
        ("general", "General"),
    ]

    PRIORITY_CHOICES = [
        ("low", "Low"),
        ("medium", "Medium"),
        ("high", "High"),
        ("urgent", "Urgent"),
    ]

    DRAFT = "draft"
    PUBLISHED = "published"
    SCHEDULED = "scheduled"
    SENT = "sent"

    STATUS_CHOICES = [
        (DRAFT, "Draft"),
        (PUBLISHED, "Published"),
        (SCHEDULED, "Scheduled"),
        (SENT, "Sent"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="updates")
    title = models.CharField(max_length=200)
    content = models.TextField()
    update_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="general")
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default="medium")
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=DRAFT)
    published_at = models.DateTimeField(null=True, blank=True)
    scheduled_for = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="event_updates")
    # {send_to_all, specific_users, user_roles}
    recipients = models.JSONField(default=dict, blank=True)
    delivery_methods = models.JSONField(default=default_delivery_methods, blank=True)
    email_stats = models.JSONField(default=default_email_stats, blank=True)
    attachments = models.JSONField(default=list, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def publish(self):
        now = timezone.now()
        if self.scheduled_for and self.scheduled_for > now:
            self.status = self.SCHEDULED
        else:
            self.status = self.PUBLISHED
            self.published_at = now
        self.save(update_fields=["status", "published_at", "updated_at"])


class EventTask(models.Model):
    """A card on an event's planning board."""

    PLANNING = "planning"
    DEVELOPING = "developing"
    REVIEWING = "reviewing"
    FINISHED = "finished"

    COLUMN_CHOICES = [
        (PLANNING, "Planning"),
        (DEVELOPING, "Developing"),
        (REVIEWING, "Reviewing"),
        (FINISHED, "Finished"),
    ]

    PRIORITY_CHOICES = [
        ("high", "High"),
        ("medium", "Medium"),
        ("low", "Low"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="planning_tasks")
    organizer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="planning_tasks")
    key = models.CharField(max_length=64)
    content = models.CharField(max_length=500)
    column = models.CharField(max_length=20, choices=COLUMN_CHOICES, default=PLANNING)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default="medium")
    estimated_duration = models.CharField(max_length=50, blank=True)
    completed = models.BooleanField(default=False)
    # [{id, content, completed}]
    subtasks = models.JSONField(default=list, blank=True)
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["position", "created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "key"], name="unique_task_key_per_event"),
        ]

    def __str__(self):
        return self.content


class Report(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="reports")
    organizer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="reports")
    prepared_by = models.CharField(max_length=160)
    key_highlights = models.TextField(blank=True)
    major_outcomes = models.TextField(blank=True)
    budget = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    sponsorship = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    actual_expenditure = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    photos = models.JSONField(default=list, blank=True)
    # {title, sections: [{heading, content: [...]}]}
    generated_content = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Report for {self.event.title}"


class EmailLog(models.Model):
    STATUS_CHOICES = (
        ("queued", "Queued"),
        ("sent", "Sent"),
        ("failed", "Failed"),
    )

    to = models.EmailField()
    subject = models.CharField(max_length=255)
    template = models.CharField(max_length=255)
    context_json = models.JSONField(default=dict, blank=True)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="queued")
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default="")
    send_key = models.CharField(max_length=255, db_index=True, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    event_id = models.CharField(max_length=64, blank=True, default="")
    ticket_id = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"]),
        ]

    def __str__(self):
        return f"{self.subject} → {self.to} [{self.status}]"

# tests/test_galleries.py
import datetime as dt
import io
import json

import pytest
from django.contrib.auth.hashers import make_password
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone
from PIL import Image
from rest_framework import status
from rest_framework.test import APIClient

from eventhub.models import Gallery, GalleryAccess, Photo, PhotoComment


def _png(name="photo.png", size=(800, 600)):
    buf = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buf, format="PNG")
    return SimpleUploadedFile(name, buf.getvalue(), content_type="image/png")


def _gallery(event, organizer, **extra):
    fields = dict(event=event, name="Highlights", created_by=organizer)
    fields.update(extra)
    return Gallery.objects.create(**fields)


def _photo(gallery, organizer, **extra):
    fields = dict(
        gallery=gallery, event=gallery.event, uploaded_by=organizer,
        file_url="https://cdn.example.com/p.jpg", original_name="p.jpg",
    )
    fields.update(extra)
    return Photo.objects.create(**fields)


@pytest.fixture
def anon():
    return APIClient()


# ── Galleries ─────────────────────────────────────────────

@pytest.mark.django_db
def test_create_gallery_hashes_password(organizer_client, event):
    res = organizer_client.post(
        reverse("gallery_list", args=[event.id]),
        {"name": "Backstage", "visibility": "restricted", "access_password": "s3cret"},
        format="json",
    )

    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["has_password"] is True
    assert "access_password" not in res.data
    assert len(res.data["shareable_link"]) == 12
    gallery = Gallery.objects.get(pk=res.data["id"])
    assert gallery.access_password != "s3cret"


@pytest.mark.django_db
def test_public_gallery_counts_views(anon, event, organizer):
    gallery = _gallery(event, organizer)

    res = anon.get(reverse("gallery_detail", args=[gallery.id]))

    assert res.status_code == 200
    assert res.data["view_count"] == 1
    gallery.refresh_from_db()
    assert gallery.view_count == 1


@pytest.mark.django_db
def test_private_gallery_only_for_managers(anon, student_client, organizer_client, event, organizer):
    gallery = _gallery(event, organizer, visibility=Gallery.PRIVATE)
    url = reverse("gallery_detail", args=[gallery.id])

    assert anon.get(url).status_code == status.HTTP_403_FORBIDDEN
    assert student_client.get(url).status_code == status.HTTP_403_FORBIDDEN
    assert organizer_client.get(url).status_code == 200


@pytest.mark.django_db
def test_restricted_gallery_password(anon, event, organizer):
    gallery = _gallery(event, organizer, visibility=Gallery.RESTRICTED, access_password=make_password("s3cret"))
    url = reverse("gallery_detail", args=[gallery.id])

    assert anon.get(url).status_code == status.HTTP_403_FORBIDDEN
    assert anon.get(url, {"password": "wrong"}).status_code == status.HTTP_403_FORBIDDEN
    assert anon.get(url, {"password": "s3cret"}).status_code == 200
    assert anon.get(url, HTTP_X_GALLERY_PASSWORD="s3cret").status_code == 200


@pytest.mark.django_db
def test_restricted_gallery_grants(student_client, student, event, organizer):
    gallery = _gallery(event, organizer, visibility=Gallery.RESTRICTED)
    url = reverse("gallery_detail", args=[gallery.id])
    assert student_client.get(url).status_code == status.HTTP_403_FORBIDDEN

    grant = GalleryAccess.objects.create(gallery=gallery, email=student.email, granted_by=organizer)
    assert student_client.get(url).status_code == 200

    grant.expires_at = timezone.now() - dt.timedelta(hours=1)
    grant.save()
    assert student_client.get(url).status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_manage_grants(organizer_client, event, organizer, student):
    gallery = _gallery(event, organizer, visibility=Gallery.RESTRICTED)
    url = reverse("gallery_access", args=[gallery.id])

    res = organizer_client.post(url, {"email": "Friend@Example.com", "access_type": "view"}, format="json")
    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["email"] == "friend@example.com"

    res = organizer_client.post(url, {"access_type": "view"}, format="json")
    assert res.status_code == 400

    res = organizer_client.get(url)
    assert len(res.data) == 1

    res = organizer_client.delete(reverse("gallery_access_detail", args=[res.data[0]["id"]]))
    assert res.status_code == status.HTTP_204_NO_CONTENT


@pytest.mark.django_db
def test_shared_link(anon, event, organizer):
    gallery = _gallery(event, organizer)
    url = reverse("gallery_shared", args=[gallery.shareable_link])

    assert anon.get(url).status_code == 200

    gallery.link_expiry = timezone.now() - dt.timedelta(minutes=5)
    gallery.save()
    assert anon.get(url).status_code == status.HTTP_410_GONE

    assert anon.get(reverse("gallery_shared", args=["nope"])).status_code == 404


@pytest.mark.django_db
def test_event_gallery_listing_hides_private_and_expired(student_client, organizer_client, event, organizer):
    _gallery(event, organizer, name="Public")
    _gallery(event, organizer, name="Members", visibility=Gallery.RESTRICTED)
    _gallery(event, organizer, name="Hidden", visibility=Gallery.PRIVATE)
    _gallery(event, organizer, name="Old", link_expiry=timezone.now() - dt.timedelta(days=1))
    url = reverse("gallery_list", args=[event.id])

    res = student_client.get(url)
    assert sorted(g["name"] for g in res.data) == ["Members", "Public"]

    res = organizer_client.get(url)
    assert len(res.data) == 4


# ── Photos ────────────────────────────────────────────────

@pytest.mark.django_db
def test_upload_photo_builds_thumbnail(organizer_client, event, organizer):
    gallery = _gallery(event, organizer)

    res = organizer_client.post(
        reverse("gallery_photos", args=[gallery.id]),
        {"image": _png(), "metadata": json.dumps({"caption": "Opening", "tags": ["Stage", " crowd "]})},
        format="multipart",
    )

    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["width"] == 800
    assert res.data["height"] == 600
    assert res.data["mime_type"] == "image/png"
    assert res.data["metadata"]["tags"] == ["stage", "crowd"]
    photo = Photo.objects.get(pk=res.data["id"])
    assert photo.thumbnail
    assert max(Image.open(photo.thumbnail).size) <= 400


@pytest.mark.django_db
def test_students_cannot_upload(student_client, event, organizer):
    gallery = _gallery(event, organizer)
    res = student_client.post(
        reverse("gallery_photos", args=[gallery.id]), {"image": _png()}, format="multipart"
    )
    assert res.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_photo_list_filters(anon, event, organizer):
    gallery = _gallery(event, organizer)
    _photo(gallery, organizer, original_name="keynote.jpg", metadata={"tags": ["stage"], "caption": "Keynote"})
    _photo(gallery, organizer, original_name="lunch.jpg", metadata={"tags": ["food"], "photographer": "Sam"})
    url = reverse("gallery_photos", args=[gallery.id])

    res = anon.get(url, {"tag": "Stage"})
    assert [p["original_name"] for p in res.data["results"]] == ["keynote.jpg"]

    res = anon.get(url, {"search": "sam"})
    assert [p["original_name"] for p in res.data["results"]] == ["lunch.jpg"]

    res = anon.get(url)
    assert res.data["count"] == 2


@pytest.mark.django_db
def test_like_and_download(anon, event, organizer):
    gallery = _gallery(event, organizer)
    photo = _photo(gallery, organizer)

    res = anon.post(reverse("photo_like", args=[photo.id]))
    assert res.data["like_count"] == 1

    res = anon.get(reverse("photo_download", args=[photo.id]))
    assert res.data["url"] == "https://cdn.example.com/p.jpg"
    photo.refresh_from_db()
    gallery.refresh_from_db()
    assert photo.download_count == 1
    assert gallery.download_count == 1

    gallery.allow_download = False
    gallery.save()
    res = anon.get(reverse("photo_download", args=[photo.id]))
    assert res.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_private_gallery_photos_are_hidden(anon, event, organizer):
    gallery = _gallery(event, organizer, visibility=Gallery.PRIVATE)
    photo = _photo(gallery, organizer)
    assert anon.get(reverse("photo_detail", args=[photo.id])).status_code == status.HTTP_403_FORBIDDEN


# ── Comments ──────────────────────────────────────────────

@pytest.mark.django_db
def test_signed_in_comments_are_approved(student_client, event, organizer):
    photo = _photo(_gallery(event, organizer), organizer)
    url = reverse("photo_comments", args=[photo.id])

    res = student_client.post(url, {"content": "Great shot!"}, format="json")
    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["is_approved"] is True
    assert res.data["author_name"] == "Stu Dent"

    res = student_client.get(url)
    assert [c["content"] for c in res.data] == ["Great shot!"]


@pytest.mark.django_db
def test_guest_comments_wait_for_moderation(anon, organizer_client, event, organizer):
    photo = _photo(_gallery(event, organizer), organizer)
    url = reverse("photo_comments", args=[photo.id])

    res = anon.post(url, {"content": "Anonymous hello"}, format="json")
    assert res.status_code == 400

    res = anon.post(url, {"content": "Hello", "guest_name": "Visitor"}, format="json")
    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["is_approved"] is False
    assert anon.get(url).data == []

    comment = PhotoComment.objects.get()
    res = organizer_client.post(reverse("photo_comment_moderation", args=[comment.id]))
    assert res.data["is_approved"] is True
    assert [c["author_name"] for c in anon.get(url).data] == ["Visitor"]


@pytest.mark.django_db
def test_comments_can_be_disabled(student_client, event, organizer):
    photo = _photo(_gallery(event, organizer, allow_comments=False), organizer)
    res = student_client.post(reverse("photo_comments", args=[photo.id]), {"content": "Hi"}, format="json")
    assert res.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_only_managers_moderate(student_client, student, event, organizer):
    photo = _photo(_gallery(event, organizer), organizer)
    comment = PhotoComment.objects.create(photo=photo, guest_name="G", content="spam")
    res = student_client.delete(reverse("photo_comment_moderation", args=[comment.id]))
    assert res.status_code == status.HTTP_403_FORBIDDEN

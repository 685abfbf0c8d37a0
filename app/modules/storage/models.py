# Supabase Storage buckets
# No tables; objects are addressed by path inside a bucket.

"""
Buckets:

thumbnails (public):
- path: {user_id}/{epoch_ms}_{name}.{ext}
- image/* only; size limited by settings.max_image_upload_mb
- public URL: {supabase_url}/storage/v1/object/public/thumbnails/{path}

extracted-files (private):
- path: {user_id}/{epoch_ms}_{name}
- source files kept for the extraction history
"""

PUBLIC_URL_MARKER = "/storage/v1/object/public/"

IMAGE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}

"""
Media app for chat uploads.

This app provides:
- StorageService for saving uploads through Django's default storage
- Pillow transforms for chat images, group images and avatars
- Upload endpoints returning the stored file URL
"""

from cliphistory.utils.images import IMAGE_EXTENSIONS, image_mime, image_size, to_dib, to_png

__all__ = [
    'IMAGE_EXTENSIONS',
    'image_mime',
    'image_size',
    'to_dib',
    'to_png',
]

"""
System constants that should never change.

These are platform/format limits, not user preferences.
User-configurable values should go in config.yaml instead.
"""

# Logging
VERBOSE_LOGGING_THRESHOLD = 2  # Standard logging level

# Destination platform limits
STICKER_SIZE_CEILING = 1024 * 1024  # 1 MiB for WEBP stickers
STICKER_CANVAS = 512  # One side must be exactly 512px

# Adaptive reducer starting point and floors
INITIAL_QUALITY = 100.0
INITIAL_FPS = 30
MIN_QUALITY = 2.0  # Loop runs while quality is above this
MIN_FPS = 5  # Loop runs while fps is above this
QUALITY_DIVISOR = 2.0
FPS_DIVISOR = 1.5

# WhatsApp sticker EXIF layout (little-endian TIFF with a single IFD entry)
EXIF_HEADER = bytes([0x49, 0x49, 0x2A, 0x00, 0x08, 0x00, 0x00, 0x00, 0x01, 0x00, 0x41, 0x57, 0x07, 0x00])
EXIF_TRAILER = bytes([0x16, 0x00, 0x00, 0x00])
EXIF_LENGTH_SIZE = 4

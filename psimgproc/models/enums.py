from enum import Enum

class ImageFormat(Enum):
    PNG = "png"
    JPG = "jpg"
    JPEG = "jpeg"   # same behavior as JPG, kept as its own identity
    TIFF = "tif"
    GIF = "gif"
    EPS = "eps"
    AI = "ai"
    UNKNOWN = "unknown"

class Units(Enum):
    PIXELS = "pixels"
    POINTS = "points"
    INCHES = "inches"

class OpenMode(Enum):
    RGB = "RGB"
    GRAYSCALE = "Grayscale"
    CMYK = "CMYK"

class AnchorPosition(Enum):
    TOP_LEFT = "TopLeft"
    MIDDLE_CENTER = "MiddleCenter"
    BOTTOM_RIGHT = "BottomRight"

class ResampleMethod(Enum):
    NEAREST = "Nearest"
    BILINEAR = "Bilinear"
    BICUBIC = "Bicubic"

class WebFormat(Enum):
    PNG = "PNG"
    JPEG = "JPEG"
    GIF = "GIF"

class ByteOrder(Enum):
    IBM = "IBM"     # little-endian
    MACOS = "MacOS"

class LayerCompression(Enum):
    RLE = "RLE"
    ZIP = "ZIP"

class PreviewType(Enum):
    NONE = "None"
    MONOCHROME_TIFF = "MonochromeTIFF"
    EIGHT_BIT_TIFF = "EightBitTIFF"

class SaveEncoding(Enum):
    ASCII = "ASCII"
    BINARY = "Binary"
    JPEG_LOW = "JPEGLow"
    JPEG_MEDIUM = "JPEGMedium"
    JPEG_HIGH = "JPEGHigh"
    JPEG_MAXIMUM = "JPEGMaximum"

class CropPage(Enum):
    BOUNDING_BOX = "BoundingBox"
    MEDIA_BOX = "MediaBox"
    CROP_BOX = "CropBox"
    TRIM_BOX = "TrimBox"

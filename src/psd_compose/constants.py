"""
Various constants for psd_compose
"""

from enum import Enum, IntEnum


class ColorMode(IntEnum):
    """
    Color mode.
    """

    BITMAP = 0
    GRAYSCALE = 1
    INDEXED = 2
    RGB = 3
    CMYK = 4
    MULTICHANNEL = 7
    DUOTONE = 8
    LAB = 9


class Compression(IntEnum):
    """
    Compression modes.

    Compression. 0 = Raw Data, 1 = RLE compressed, 2 = ZIP without prediction,
    3 = ZIP with prediction.
    """

    RAW = 0
    RLE = 1
    ZIP = 2
    ZIP_WITH_PREDICTION = 3


class SectionDivider(IntEnum):
    OTHER = 0
    OPEN_FOLDER = 1
    CLOSED_FOLDER = 2
    BOUNDING_SECTION_DIVIDER = 3


class Tag(Enum):
    """
    Tagged blocks keys understood by the layer reader.

    Any other key is kept as raw bytes.
    """

    LAYER = b"Layr"
    LAYER_16 = b"Lr16"
    LAYER_32 = b"Lr32"
    LAYER_ID = b"lyid"
    NESTED_SECTION_DIVIDER_SETTING = b"lsdk"
    SECTION_DIVIDER_SETTING = b"lsct"
    TYPE_TOOL_INFO = b"tySh"
    TYPE_TOOL_OBJECT_SETTING = b"TySh"
    UNICODE_LAYER_NAME = b"luni"
    USER_MASK = b"LMsk"
    SAVING_MERGED_TRANSPARENCY = b"Mtrn"
    SAVING_MERGED_TRANSPARENCY16 = b"Mt16"
    SAVING_MERGED_TRANSPARENCY32 = b"Mt32"
    ALPHA = b"Alph"
    FILTER_MASK = b"FMsk"
    FILTER_EFFECTS1 = b"FXid"
    FILTER_EFFECTS2 = b"FEid"
    FILTER_EFFECTS3 = b"PxSD"
    LINKED_LAYER2 = b"lnk2"
    LINKED_LAYER3 = b"lnk3"
    LINKED_LAYER_EXTERNAL = b"lnkE"
    PIXEL_SOURCE_DATA2 = b"PxSc"
    UNICODE_PATH_NAME = b"pths"
    EXPORT_SETTING1 = b"extd"
    EXPORT_SETTING2 = b"extn"
    COMPOSITOR_INFO = b"cinf"
    ARTBOARD_DATA2 = b"abdd"


class OSType(Enum):
    """
    Descriptor OSTypes and reference OSTypes.
    """

    # OS types
    REFERENCE = b"obj "
    DESCRIPTOR = b"Objc"
    LIST = b"VlLs"
    DOUBLE = b"doub"
    UNIT_FLOAT = b"UntF"
    UNIT_FLOATS = b"UnFl"  # Undocumented
    STRING = b"TEXT"
    ENUMERATED = b"enum"
    INTEGER = b"long"
    LARGE_INTEGER = b"comp"
    BOOLEAN = b"bool"
    GLOBAL_OBJECT = b"GlbO"
    CLASS1 = b"type"
    CLASS2 = b"GlbC"
    ALIAS = b"alis"
    RAW_DATA = b"tdta"
    OBJECT_ARRAY = b"ObAr"  # Undocumented
    PATH = b"Pth "  # Undocumented

    # Reference OS types
    PROPERTY = b"prop"
    CLASS3 = b"Clss"
    ENUMERATED_REFERENCE = b"Enmr"
    OFFSET = b"rele"
    IDENTIFIER = b"Idnt"
    INDEX = b"indx"
    NAME = b"name"


class LayerKind(str, Enum):
    """
    Kind of a layer node in the document tree.
    """

    GROUP = "group"
    TEXT = "text"
    OTHER = "other"


class Justification(str, Enum):
    """
    Horizontal anchoring of rendered text.
    """

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


#: Paragraph ``Justification`` values stored in EngineData.
ENGINE_JUSTIFICATION = {
    0: "left",
    1: "right",
    2: "center",
    3: "justify-left",
    4: "justify-right",
    5: "justify-center",
    6: "justify-all",
}

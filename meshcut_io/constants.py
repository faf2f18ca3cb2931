"""Constants for the OFF/OBJ text formats and the packed sequence wire format."""

import numpy as np


class FormatConstants:
    """Tokens, prefixes and defaults shared by the readers and writers."""

    COMMENT_PREFIX = "#"
    """Lines starting with this character are skipped by the line scanner."""

    OFF_HEADER = "OFF"
    """Token the first meaningful line of an OFF file must contain."""

    OBJ_VERTEX = "v "
    OBJ_NORMAL = "vn "
    OBJ_TEXCOORD = "vt "
    OBJ_FACE = "f "

    OBJ_SLOT_SEPARATOR = "/"
    """Separator between the vertex, texcoord and normal fields of a face slot."""

    MIN_FACE_SIZE = 3
    """Smallest polygon the readers accept."""

    MAX_ELEMENT_COUNT = int(np.iinfo(np.uint32).max)
    """Largest vertex, face or edge count an OFF header may declare."""

    FLOAT_FORMAT = "%f"
    """Default printf-style format for coordinates written to disk."""

    INDEX_DTYPE = np.uint32
    COORD_DTYPE = np.float64

    WIRE_DTYPE = np.dtype("<u4")
    """Element type of packed sequence buffers received as raw bytes."""

    SEAM_FILE_TEMPLATE = "frag-{component}-seam-vertices{flags}.txt"

    @staticmethod
    def seam_flag(sequence_id: int, is_loop: bool) -> str:
        """Get the file name fragment recording one sequence's loop flag.

        Args:
            sequence_id: Position of the sequence in the decoded list
            is_loop: Whether the sequence is closed

        Returns:
            Fragment like "-id0_isLOOP" or "-id1_isOPEN"
        """
        return f"-id{sequence_id}_{'isLOOP' if is_loop else 'isOPEN'}"

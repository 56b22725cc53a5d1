"""MediaPipe Hands / Pose landmark definitions."""

from enum import IntEnum

HAND_LANDMARK_COUNT = 21
POSE_LANDMARK_COUNT = 33


class HandLandmark(IntEnum):
    """MediaPipe Hands 21-point indices."""

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class PoseLandmark(IntEnum):
    """The MediaPipe Pose indices used by the arm extractors."""

    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16


# (MCP, PIP, DIP, TIP) for each long finger
FINGER_CHAINS = {
    "index": (HandLandmark.INDEX_MCP, HandLandmark.INDEX_PIP,
              HandLandmark.INDEX_DIP, HandLandmark.INDEX_TIP),
    "middle": (HandLandmark.MIDDLE_MCP, HandLandmark.MIDDLE_PIP,
               HandLandmark.MIDDLE_DIP, HandLandmark.MIDDLE_TIP),
    "ring": (HandLandmark.RING_MCP, HandLandmark.RING_PIP,
             HandLandmark.RING_DIP, HandLandmark.RING_TIP),
    "pinky": (HandLandmark.PINKY_MCP, HandLandmark.PINKY_PIP,
              HandLandmark.PINKY_DIP, HandLandmark.PINKY_TIP),
}

# Pose arm chain per body side: (shoulder, elbow, wrist)
ARM_CHAINS = {
    "left": (PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_WRIST),
    "right": (PoseLandmark.RIGHT_SHOULDER, PoseLandmark.RIGHT_ELBOW, PoseLandmark.RIGHT_WRIST),
}

# Kapandji opposition targets in increasing difficulty (level 1..10).
# Level 10, the distal palmar crease, has no landmark of its own and is
# approximated by the centroid of the listed points.
KAPANDJI_TARGETS = {
    1: (HandLandmark.INDEX_PIP,),     # lateral side of index proximal phalanx
    2: (HandLandmark.INDEX_DIP,),     # lateral side of index middle phalanx
    3: (HandLandmark.INDEX_TIP,),
    4: (HandLandmark.MIDDLE_TIP,),
    5: (HandLandmark.RING_TIP,),
    6: (HandLandmark.PINKY_TIP,),
    7: (HandLandmark.PINKY_DIP,),
    8: (HandLandmark.PINKY_PIP,),
    9: (HandLandmark.PINKY_MCP,),
    10: (HandLandmark.WRIST, HandLandmark.MIDDLE_MCP,
         HandLandmark.RING_MCP, HandLandmark.PINKY_MCP),
}

KAPANDJI_TARGET_NAMES = {
    1: "Index proximal phalanx",
    2: "Index middle phalanx",
    3: "Index fingertip",
    4: "Middle fingertip",
    5: "Ring fingertip",
    6: "Little fingertip",
    7: "Little finger DIP crease",
    8: "Little finger PIP crease",
    9: "Little finger MCP crease",
    10: "Distal palmar crease",
}

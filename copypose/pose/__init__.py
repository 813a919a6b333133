"""
Pose utilities.

This package defines the model-agnostic KeypointSet type, the PoseProvider
interface (MediaPipe adapter included) and the angle-based comparison used to
decide whether a live pose matches a reference pose.
"""

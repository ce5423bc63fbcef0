"""
Geographic primitives: bboxes, the geohash codec, key-length selection and projection.
"""

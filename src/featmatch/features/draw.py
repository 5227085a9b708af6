#!/usr/bin/env python3
import cv2


def draw_keypoints(img, keypoints, color=None):
    """Draw keypoints with their size; color=None gives each one a random color."""
    color = (-1, -1, -1, -1) if color is None else color
    return cv2.drawKeypoints(
        img, keypoints, None,
        color=color, flags=cv2.DRAW_MATCHES_FLAGS_DRAW_RICH_KEYPOINTS)


def draw_matches(img1, keypoints1, img2, keypoints2, matches):
    """
    Draw matches between two frames side by side.

    Args:
        img1: Source frame
        keypoints1: Keypoints of the source frame
        img2: Reference frame
        keypoints2: Keypoints of the reference frame
        matches: List of cv2.DMatch (queryIdx into keypoints1, trainIdx into keypoints2)

    Returns:
        Image with both frames and the match lines
    """
    return cv2.drawMatches(
        img1, keypoints1, img2, keypoints2, matches, None,
        matchColor=(-1, -1, -1, -1), singlePointColor=(-1, -1, -1, -1),
        flags=cv2.DRAW_MATCHES_FLAGS_DRAW_RICH_KEYPOINTS)


def show_image(window_name, img, wait=True):
    cv2.namedWindow(window_name, cv2.WINDOW_GUI_EXPANDED)
    cv2.imshow(window_name, img)
    if wait:
        cv2.waitKey(0)

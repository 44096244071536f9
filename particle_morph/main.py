"""
ParticleMorph - Main Entry Point.
=================================

This module boots the runnable shell around the gesture -> particle core:
1. Perception: ThreadedCamera + MediaPipe HandLandmarker.
2. Cognition: MorphController (classifier, debouncer, targets, morph).
3. Feedback: ParticleHUD in an OpenCV window.

Usage:
    $ particle-morph
    $ python -m particle_morph.main
"""
import logging
import time

import cv2

from particle_morph.config import CONFIG, init_environment
from particle_morph.controller import MorphController
from particle_morph.ui.hud import ParticleHUD
from particle_morph.vision.camera import ThreadedCamera
from particle_morph.vision.tracker import HandTracker


def main():
    """
    Main Event Loop.
    """
    # 1. Boot Sequence
    logging.basicConfig(level=CONFIG["LOG_LEVEL"],
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_environment()
    print("✨ PARTICLE MORPH: ONLINE")
    print("   -> Press 'ESC' to Exit")
    print("   -> Press 'F' to Toggle Fullscreen")

    # 2. Initialize Subsystems
    window_name = CONFIG["WINDOW_NAME"]
    cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
    cv2.resizeWindow(window_name, CONFIG["WINDOW_WIDTH"], CONFIG["WINDOW_HEIGHT"])

    controller = MorphController()
    hud = ParticleHUD()
    tracker = HandTracker()
    cam = ThreadedCamera()

    start = time.time()
    prev_time = start
    last_frame_id = -1
    fullscreen = False

    try:
        while True:
            now = time.time()
            elapsed = now - start

            # --- 1. PERCEPTION (only when the camera produced a new frame) ---
            ret, frame, frame_id = cam.read()
            if ret and frame is not None and frame_id != last_frame_id:
                last_frame_id = frame_id
                frame = cv2.flip(frame, 1)  # Mirror for intuitive interaction
                landmarks = tracker.detect(frame, int(elapsed * 1000))
                controller.on_hand_frame(landmarks)

            # --- 2. MORPH ---
            field = controller.on_render(elapsed)

            # --- 3. FEEDBACK ---
            status = tracker.status or cam.status
            canvas = hud.render(field, controller.hand_state, elapsed, status=status)

            fps = 1 / (now - prev_time) if (now - prev_time) > 0 else 0
            prev_time = now
            hud.draw_fps(canvas, fps)

            cv2.imshow(window_name, canvas)

            # Input Handling
            k = cv2.waitKey(1) & 0xFF
            if k == 27: break  # ESC
            elif k in (ord('f'), ord('F')):
                fullscreen = not fullscreen
                cv2.setWindowProperty(window_name, cv2.WND_PROP_FULLSCREEN,
                                      cv2.WINDOW_FULLSCREEN if fullscreen else cv2.WINDOW_NORMAL)

    finally:
        # Graceful Shutdown
        cam.release()
        tracker.close()
        cv2.destroyAllWindows()
        print("🔴 PARTICLE MORPH OFFLINE")


if __name__ == "__main__":
    main()

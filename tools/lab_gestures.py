import cv2
import sys
import os
import time

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from particle_morph.config import CONFIG
from particle_morph.core.stabilizer import GestureDebouncer
from particle_morph.gesture_engine import GestureClassifier
from particle_morph.hand_utils import to_coords
from particle_morph.vision.tracker import HandTracker

# Wrist -> fingertip chains, for drawing the skeleton
FINGER_CHAINS = [
    (0, 1, 2, 3, 4),
    (0, 5, 6, 7, 8),
    (0, 9, 10, 11, 12),
    (0, 13, 14, 15, 16),
    (0, 17, 18, 19, 20),
]

WIN = "Gesture Lab"


def run_lab():
    print("🖐  GESTURE LAB (Classifier + Debounce)")
    print("   -> Tune the finger thresholds live.")
    print("   -> Green finger = OPEN | Grey finger = CLOSED")
    print("   -> 'S' prints the config values, 'ESC' quits")

    cv2.namedWindow(WIN, cv2.WINDOW_NORMAL)
    cv2.resizeWindow(WIN, 1000, 700)

    def nothing(x): pass

    # Sliders
    # Finger factor: 1.00 to 1.50
    cv2.createTrackbar("FINGER x100", WIN, int(CONFIG["FINGER_OPEN_FACTOR"] * 100), 150, nothing)
    # Thumb factor: 0.00 to 1.50
    cv2.createTrackbar("THUMB x100", WIN, int(CONFIG["THUMB_OPEN_FACTOR"] * 100), 150, nothing)
    # Debounce window: 1 to 9
    cv2.createTrackbar("WINDOW", WIN, CONFIG["DEBOUNCE_WINDOW"], 9, nothing)

    cam = cv2.VideoCapture(CONFIG["CAMERA_INDEX"])
    tracker = HandTracker()
    classifier = GestureClassifier()
    debouncer = GestureDebouncer()
    start = time.time()

    while True:
        # Live Updates
        finger_val = max(cv2.getTrackbarPos("FINGER x100", WIN), 100) / 100.0
        thumb_val = cv2.getTrackbarPos("THUMB x100", WIN) / 100.0
        window_val = max(cv2.getTrackbarPos("WINDOW", WIN), 1)

        classifier.kinematics.finger_factor = finger_val
        classifier.kinematics.thumb_factor = thumb_val
        if window_val != debouncer.window:
            debouncer = GestureDebouncer(window=window_val)

        ret, frame = cam.read()
        if not ret: break
        frame = cv2.flip(frame, 1)
        h, w, _ = frame.shape

        landmarks = tracker.detect(frame, int((time.time() - start) * 1000))
        coords = to_coords(landmarks)
        raw = classifier.classify(coords)
        debouncer.update(raw, hand_present=coords is not None)

        fingers = classifier.finger_state(coords)
        if coords is not None:
            opened = fingers.as_tuple()
            for chain, is_open in zip(FINGER_CHAINS, opened):
                col = (0, 255, 0) if is_open else (80, 80, 80)
                pts = [(int(coords[i, 0] * w), int(coords[i, 1] * h)) for i in chain]
                for a, b in zip(pts, pts[1:]):
                    cv2.line(frame, a, b, col, 2)
                for p in pts:
                    cv2.circle(frame, p, 3, col, -1)

        bits = "".join("1" if b else "0" for b in fingers.as_tuple()) if fingers else "-----"

        # HUD
        cv2.rectangle(frame, (20, h-150), (420, h-20), (0,0,0), -1)
        cv2.putText(frame, f"STABLE: {debouncer.last_gesture.value}", (30, h-120), 1, 1.5, (0, 255, 0), 2)
        cv2.putText(frame, f"RAW: {raw.value}  BITS(T I M R P): {bits}", (30, h-90), 1, 1, (255,255,255), 1)
        cv2.putText(frame, f"FINGER: {finger_val:.2f}  THUMB: {thumb_val:.2f}", (30, h-60), 1, 1, (255,255,255), 1)
        cv2.putText(frame, f"WINDOW: {window_val}", (30, h-30), 1, 1, (255,255,255), 1)
        if tracker.status:
            cv2.putText(frame, tracker.status, (30, 40), 1, 1.5, (0, 0, 255), 2)

        cv2.imshow(WIN, frame)
        k = cv2.waitKey(1)
        if k == 27: break
        if k == ord('s'):
            print("\n" + "="*40)
            print("💾 CONFIG VALUES (CLASSIFIER):")
            print(f'    "FINGER_OPEN_FACTOR": {finger_val:.2f},')
            print(f'    "THUMB_OPEN_FACTOR": {thumb_val:.2f},')
            print(f'    "DEBOUNCE_WINDOW": {window_val},')
            print("="*40 + "\n")

    cam.release()
    tracker.close()
    cv2.destroyAllWindows()

if __name__ == "__main__":
    run_lab()

#!/usr/bin/env python3
"""
Capture OCR - recognize text in a single camera frame

Usage:
    python main.py image.png                 # Recognize an image file
    python main.py image.png --lang deu      # Use another Tesseract language
"""
import logging
import sys
from pathlib import Path


CRASH_LOG_DIR = Path.home() / ".capture_ocr" / "logs"


def _setup_exception_handler(log_dir: Path = CRASH_LOG_DIR):
    """
    Log uncaught exceptions and keep a crash report.

    The report records the command line and interpreter next to the
    traceback, so a failing recognition can be rerun.
    """
    import traceback
    from datetime import datetime

    def global_exception_handler(exc_type, exc_value, exc_tb):
        # Don't catch KeyboardInterrupt
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return

        logger = logging.getLogger("capture_ocr")
        logger.critical("Unhandled error", exc_info=(exc_type, exc_value, exc_tb))

        report = [
            f"argv: {' '.join(sys.argv)}",
            f"python: {sys.version.split()[0]}",
            "",
            ''.join(traceback.format_exception(exc_type, exc_value, exc_tb)),
        ]
        crash_log = log_dir / f"crash_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            crash_log.write_text("\n".join(report), encoding='utf-8')
        except OSError as e:
            logger.warning("Could not write crash report %s: %s", crash_log, e)
            return
        print(f"Crash report written to {crash_log}", file=sys.stderr)

    sys.excepthook = global_exception_handler


def main(argv=None):
    """Main entry point"""
    _setup_exception_handler()
    args = list(sys.argv[1:] if argv is None else argv)

    if not args or args[0] in ('-h', '--help'):
        print(__doc__)
        print("Options:")
        print("  -h, --help           Show this help message")
        print("  --lang <code>        Tesseract language (default: eng)")
        print("  --threshold          Enable adaptive thresholding")
        print("  --strip-whitespace   Remove all whitespace from the text")
        print("  --verbose            Debug logging")
        return 0

    from capture_ocr.config import PipelineConfig

    config = PipelineConfig.from_env()
    image_path = None
    verbose = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == '--lang' and i + 1 < len(args):
            config.language = args[i + 1]
            i += 1
        elif arg == '--threshold':
            config.adaptive_threshold = True
        elif arg == '--strip-whitespace':
            config.strip_whitespace = True
        elif arg == '--verbose':
            verbose = True
        elif image_path is None:
            image_path = arg
        else:
            print(f"Error: Unexpected argument: {arg}")
            return 1
        i += 1

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if image_path is None:
        print("Error: No image given")
        return 1
    return cli_recognize(image_path, config)


def cli_recognize(image_path: str, config) -> int:
    """
    Recognize a single image file from the command line.

    The greyscale pixels are fed to the pipeline as the Y plane of a camera frame.
    """
    import cv2
    from capture_ocr.controller import CaptureController
    from capture_ocr.recognize_task import RecognizeTask
    from capture_ocr.tesseract_engine import TesseractEngine

    path = Path(image_path)
    if not path.exists():
        print(f"Error: File not found: {path}")
        return 1

    gray = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if gray is None:
        print(f"Error: Not an image file: {path}")
        return 1

    height, width = gray.shape
    controller = CaptureController()
    engine = TesseractEngine(lang=config.language, psm=config.page_seg_mode)

    print(f"Recognizing: {path} ({width}x{height})")
    task = RecognizeTask(controller, engine, gray.tobytes(), width, height, config=config)
    task.execute()
    controller.run_pending(timeout=120.0)

    message = controller.handler.receive(timeout=0)
    if message is None or not message.succeeded:
        print("No text recognized")
        return 1

    result = message.result
    print(f"\n{'='*50}")
    print(result.text)
    print(f"{'='*50}")
    print(f"  Mean confidence: {result.mean_confidence}")
    print(f"  Words: {len(result.word_boxes)}  Lines: {len(result.line_boxes)}  "
          f"Characters: {len(result.character_boxes)}")
    print(f"  Time: {result.recognition_time_ms} ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())

# Capture OCR Core Module
# NOTE: The Tesseract adapter is NOT eagerly loaded here.
# Import it directly from its module so pytesseract is only required when used:
#   from capture_ocr.tesseract_engine import TesseractEngine

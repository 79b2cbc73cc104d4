# Desktop (Qt) front end for capture_ocr

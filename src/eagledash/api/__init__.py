# API Module - local REST backend for the dashboard UI

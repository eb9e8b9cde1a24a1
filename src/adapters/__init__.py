"""Adaptadores de infraestructura (subprocess, xcodebuild, xcrun, prompts)."""

"""Pipeline architecture for page conversion."""

from .base import ConversionContext, ConversionPipeline, ConversionStep, EventEmitter

__all__ = ["ConversionContext", "ConversionPipeline", "ConversionStep", "EventEmitter"]

"""
Object Detector Module.

Wraps a pre-trained object-detection model from Hugging Face
``transformers``. No training or fine-tuning happens here: the model is
an opaque collaborator that maps an image to labelled boxes.

Default Model:
    - hustvl/yolos-tiny (COCO classes)

Author: SnapCrop Team
"""

import time
from typing import Any, Dict, List, Optional

from PIL import Image

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.utils.exceptions import InferenceError, ModelLoadError
from .detection import BoundingBox, Detection

logger = get_logger(__name__)


class ObjectDetector:
    """
    Transformer-based object detector.

    The pipeline is loaded lazily on the first call to ``detect`` and
    reused afterwards.

    Attributes:
        model_name: Name of the pre-trained model
        device: Device to run inference on (cpu/cuda)
        min_score: Detections below this confidence are dropped

    Example:
        >>> detector = ObjectDetector()
        >>> detections = detector.detect(image)
        >>> [d.label for d in detections]
        ['person', 'dog']
    """

    DEFAULT_MODEL = "hustvl/yolos-tiny"

    def __init__(
        self,
        model_name: Optional[str] = None,
        device: Optional[str] = None,
        min_score: Optional[float] = None
    ) -> None:
        self.model_name = model_name or get_config("detection.model", self.DEFAULT_MODEL)
        self.device = device or get_config("detection.device", "cpu")
        self.min_score = min_score if min_score is not None else \
            get_config("detection.min_score", 0.5)
        self.pipeline = None

        logger.debug(
            f"ObjectDetector configured (model={self.model_name}, "
            f"device={self.device}, min_score={self.min_score})"
        )

    def load(self) -> None:
        """
        Load the object-detection pipeline.

        Raises:
            ModelLoadError: If transformers is missing or the model
                            cannot be loaded.
        """
        if self.pipeline is not None:
            return

        try:
            from transformers import pipeline
        except ImportError:
            raise ModelLoadError(
                self.model_name,
                "transformers package not installed. Install with: pip install transformers"
            )

        logger.info(f"Loading model: {self.model_name}")
        try:
            self.pipeline = pipeline(
                "object-detection",
                model=self.model_name,
                device=0 if self.device == "cuda" else -1
            )
        except Exception as e:
            raise ModelLoadError(self.model_name, str(e))

        logger.info("Loaded object-detection pipeline successfully")

    def detect(self, image: Image.Image) -> List[Detection]:
        """
        Detect objects in an image.

        Boxes come back in the pixel space of ``image``; callers pass the
        rendered-size image so boxes are in rendered coordinates.

        Args:
            image: PIL Image as displayed.

        Returns:
            Detections in model output order.

        Raises:
            ModelLoadError: If the model cannot be loaded.
            InferenceError: If inference fails. No partial results.
        """
        self.load()
        start_time = time.time()

        if image.mode != 'RGB':
            image = image.convert('RGB')

        try:
            raw = self.pipeline(image)
        except Exception as e:
            logger.error(f"Detection failed: {e}")
            raise InferenceError(str(e))

        try:
            detections = [
                self._to_detection(item)
                for item in raw
                if float(item.get('score', 0.0)) >= self.min_score
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise InferenceError(f"Unexpected model output: {e}")

        logger.info(
            f"Detection complete: {len(detections)} object(s) "
            f"({time.time() - start_time:.2f}s)"
        )
        return detections

    @staticmethod
    def _to_detection(item: Dict[str, Any]) -> Detection:
        """
        Convert one pipeline result to a Detection.

        The pipeline reports ``{'score', 'label', 'box': {xmin, ymin, xmax, ymax}}``.
        """
        box = item['box']
        return Detection(
            label=str(item['label']),
            score=float(item['score']),
            bbox=BoundingBox.from_corners(
                float(box['xmin']), float(box['ymin']),
                float(box['xmax']), float(box['ymax'])
            )
        )

    def get_model_info(self) -> Dict[str, Any]:
        return {
            'model_name': self.model_name,
            'device': self.device,
            'min_score': self.min_score,
            'loaded': self.pipeline is not None,
        }

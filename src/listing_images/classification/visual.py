"""Visual recognition: label normalization and a local ONNX recognizer."""

import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from PIL import Image

from ..core.exceptions import VisualRecognitionUnavailable

# Recognizer labels mapped onto listing keyword tokens.
LABEL_MAP: Dict[str, str] = {
    "dress": "dress",
    "shirt": "shirt",
    "t-shirt": "t-shirt",
    "jersey": "t-shirt",
    "jean": "jeans",
    "jeans": "jeans",
    "pants": "pants",
    "trousers": "pants",
    "shoes": "sneakers",
    "running-shoe": "sneakers",
    "running-shoes": "sneakers",
    "sports-shoe": "sneakers",
    "tennis-shoe": "sneakers",
    "sneakers": "sneakers",
    "cowboy-boot": "boots",
    "boots": "boots",
    "sandal": "sandals",
    "loafer": "loafers",
    "handbag": "handbag",
    "purse": "handbag",
    "backpack": "backpack",
    "wallet": "wallet",
    "watch": "watch",
    "digital-watch": "watch",
    "analog-clock": "watch",
    "sunglasses": "sunglasses",
    "sunglass": "sunglasses",
    "jacket": "jacket",
    "coat": "coat",
    "trench-coat": "coat",
    "fur-coat": "coat",
    "sweater": "sweater",
    "sweatshirt": "hoodie",
    "cardigan": "cardigan",
    "skirt": "skirt",
    "miniskirt": "skirt",
    "shorts": "shorts",
    "phone": "smartphone",
    "mobile-phone": "smartphone",
    "cellular-telephone": "smartphone",
    "laptop": "laptop",
    "notebook": "laptop",
    "headphones": "headphones",
    "camera": "camera",
    "reflex-camera": "camera",
    "bottle": "water-bottle",
    "water-bottle": "water-bottle",
    "cup": "cup",
    "coffee-mug": "cup",
    "chair": "chair",
    "table": "table",
    "sofa": "sofa",
    "couch": "sofa",
    "studio-couch": "sofa",
    "bed": "bed",
    "lamp": "lamp",
    "table-lamp": "lamp",
    "espresso-maker": "coffee-maker",
    "coffeepot": "coffee-maker",
    "teapot": "kettle",
    "toaster": "toaster",
    "microwave": "microwave",
    "vacuum": "vacuum",
    "electric-fan": "fan",
}

STOP_WORDS = frozenset({"image", "photo", "picture", "photograph", "snapshot"})

_LABEL_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")

Prediction = Tuple[str, float]


def normalize_label(label: str) -> str:
    """``"Running Shoe"`` -> ``"running-shoe"``."""
    cleaned = _LABEL_DISALLOWED.sub("", label.lower())
    return _WHITESPACE_RUN.sub("-", cleaned.strip())


def visual_tokens(
    predictions: Iterable[Prediction],
    threshold: float = 0.30,
    limit: int = 4,
) -> List[str]:
    """
    Turn raw recognizer predictions into keyword tokens.

    Predictions above ``threshold`` are normalized, deduplicated, mapped
    through ``LABEL_MAP``, filtered against ``STOP_WORDS`` and capped at
    ``limit``.

    Args:
        predictions: ``(label, confidence)`` pairs
        threshold: Minimum confidence (exclusive)
        limit: Maximum number of tokens

    Returns:
        Ordered tokens
    """
    labels: List[str] = []
    for label, confidence in predictions:
        if confidence <= threshold:
            continue
        normalized = normalize_label(label)
        if len(normalized) > 2 and normalized not in labels:
            labels.append(normalized)

    tokens: List[str] = []
    for label in labels:
        token = LABEL_MAP.get(label, label)
        if len(token) > 2 and token not in STOP_WORDS and token not in tokens:
            tokens.append(token)
    return tokens[:limit]


class OnnxVisualRecognizer:
    """
    Local ImageNet-style classifier backed by onnxruntime.

    The model and labels are loaded on first use. Any inability to run
    (runtime not installed, model or labels missing) raises
    ``VisualRecognitionUnavailable`` so callers can degrade to
    filename-only classification.
    """

    MEAN = (0.485, 0.456, 0.406)
    STD = (0.229, 0.224, 0.225)

    def __init__(
        self,
        model_path: Union[str, Path],
        labels: Union[str, Path, Sequence[str]],
        input_size: int = 224,
        top_k: int = 5,
    ):
        self.model_path = Path(model_path)
        self._labels_source = labels
        self.input_size = input_size
        self.top_k = top_k
        self._session: Optional[Any] = None
        self._labels: Optional[List[str]] = None

    def _load(self) -> Any:
        if self._session is not None:
            return self._session
        try:
            import onnxruntime
        except ImportError as exc:
            raise VisualRecognitionUnavailable(
                "onnxruntime is required for visual recognition"
            ) from exc
        if not self.model_path.is_file():
            raise VisualRecognitionUnavailable(f"Model not found: {self.model_path}")

        self._labels = self._read_labels()
        try:
            self._session = onnxruntime.InferenceSession(
                str(self.model_path), providers=["CPUExecutionProvider"]
            )
        except Exception as exc:
            raise VisualRecognitionUnavailable(
                f"Cannot load model {self.model_path}: {exc}"
            ) from exc
        return self._session

    def _read_labels(self) -> List[str]:
        source = self._labels_source
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.is_file():
                raise VisualRecognitionUnavailable(f"Labels not found: {path}")
            return [
                line.strip()
                for line in path.read_text(encoding="utf-8").splitlines()
                if line.strip()
            ]
        return list(source)

    def _to_tensor(self, image: "Image.Image") -> Any:
        import numpy as np

        resized = image.convert("RGB").resize(
            (self.input_size, self.input_size), Image.Resampling.BILINEAR
        )
        array = np.asarray(resized, dtype=np.float32) / 255.0
        array = (array - np.array(self.MEAN, dtype=np.float32)) / np.array(
            self.STD, dtype=np.float32
        )
        return array.transpose(2, 0, 1)[np.newaxis, ...]

    def recognize(self, image: "Image.Image") -> List[Prediction]:
        """Top-k ``(label, probability)`` predictions for a decoded image."""
        try:
            import numpy as np
        except ImportError as exc:
            raise VisualRecognitionUnavailable(
                "numpy is required for visual recognition"
            ) from exc

        session = self._load()
        input_name = session.get_inputs()[0].name
        logits = session.run(None, {input_name: self._to_tensor(image)})[0][0]

        shifted = np.exp(logits - np.max(logits))
        probabilities = shifted / shifted.sum()
        labels = self._labels or []
        ranked = np.argsort(probabilities)[::-1][: self.top_k]
        return [
            (labels[i] if i < len(labels) else str(i), float(probabilities[i]))
            for i in ranked
        ]

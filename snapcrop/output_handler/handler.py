"""
Main Output Handler Module.

Writes the artefacts of a session pass to an output directory:
    - detection: annotated overlay, one image per region, regions.json
    - recognition: text.txt, recognition.json, optional invoice draft

These are per-run files; nothing is kept between runs.

Author: SnapCrop Team
"""

import json
import mimetypes
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.utils.helpers import decode_data_uri, ensure_directory, safe_filename
from snapcrop.utils.exceptions import ArtifactWriteError
from snapcrop.session.state import SessionState
from .excel_exporter import InvoiceDraftExporter

logger = get_logger(__name__)


class OutputHandler:
    """
    Saves session results to disk.

    Attributes:
        output_dir: Default directory for artefacts
        excel_enabled: Whether recognition also writes an invoice draft

    Example:
        >>> handler = OutputHandler()
        >>> info = handler.save_detection(session.state)
        >>> info['regions']
        ['outputs/crops/01_dog.png']
    """

    def __init__(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        excel_enabled: Optional[bool] = None
    ) -> None:
        self.output_dir = Path(output_dir or get_config("paths.output_dir", "outputs"))
        self.excel_enabled = excel_enabled if excel_enabled is not None else \
            get_config("output.excel.enabled", False)
        self._excel_exporter = None

        logger.debug(f"OutputHandler initialized (output_dir={self.output_dir}, excel={self.excel_enabled})")

    @property
    def excel_exporter(self) -> InvoiceDraftExporter:
        if self._excel_exporter is None:
            self._excel_exporter = InvoiceDraftExporter()
        return self._excel_exporter

    def save_detection(self, state: SessionState) -> Dict[str, Any]:
        """
        Write the overlay, the crops and a manifest.

        Returns:
            {'overlay': path or None, 'regions': [paths], 'manifest': path}

        Raises:
            ArtifactWriteError: If a file cannot be written.
        """
        out_dir = self._prepare_directory(self.output_dir)
        info: Dict[str, Any] = {'overlay': None, 'regions': [], 'manifest': None}

        if state.overlay is not None:
            overlay_path = out_dir / get_config("output.overlay_filename", "overlay.png")
            self._write(overlay_path, lambda p: state.overlay.save(p, format="PNG"))
            info['overlay'] = str(overlay_path)

        crops_dir = out_dir / get_config("output.crops_dirname", "crops")
        manifest_regions = []
        if state.regions:
            self._prepare_directory(crops_dir)
        for index, region in enumerate(state.regions, 1):
            mime_type, payload = decode_data_uri(region.image_data)
            suffix = mimetypes.guess_extension(mime_type) or ".png"
            crop_path = crops_dir / f"{index:02d}_{safe_filename(region.label)}{suffix}"
            self._write(crop_path, lambda p: p.write_bytes(payload))
            info['regions'].append(str(crop_path))
            manifest_regions.append({**region.to_dict(), 'file': crop_path.name})

        manifest = {
            'source': state.source_name,
            'status': state.status.value,
            'message': state.message,
            'native_size': self._native_size(state),
            'rendered_size': self._rendered_size(state),
            'regions': manifest_regions,
        }
        manifest_path = out_dir / get_config("output.manifest_filename", "regions.json")
        self._write_json(manifest_path, manifest)
        info['manifest'] = str(manifest_path)

        logger.info(f"Saved {len(info['regions'])} region(s) to {out_dir}")
        return info

    def save_recognition(self, state: SessionState) -> Dict[str, Any]:
        """
        Write recognized text, a JSON summary and optionally an invoice draft.

        Returns:
            {'text': path or None, 'summary': path, 'excel': path or None}
        """
        out_dir = self._prepare_directory(self.output_dir)
        info: Dict[str, Any] = {'text': None, 'summary': None, 'excel': None}
        recognition = state.recognition

        if recognition is not None:
            text_path = out_dir / "text.txt"
            self._write(text_path, lambda p: p.write_text(recognition.text + "\n", encoding='utf-8'))
            info['text'] = str(text_path)

        summary = {
            'source': state.source_name,
            'status': state.status.value,
            'message': state.message,
            'recognition': recognition.to_dict() if recognition else None,
        }
        summary_path = out_dir / "recognition.json"
        self._write_json(summary_path, summary)
        info['summary'] = str(summary_path)

        if self.excel_enabled and recognition is not None and recognition.has_numbers:
            excel_path = out_dir / get_config("output.excel.filename", "invoice_draft.xlsx")
            info['excel'] = self.excel_exporter.export(recognition, excel_path, state.source_name)

        return info

    def _write_json(self, path: Path, payload: Dict[str, Any]) -> None:
        self._write(
            path,
            lambda p: p.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding='utf-8')
        )

    @staticmethod
    def _prepare_directory(path: Path) -> Path:
        try:
            return ensure_directory(path)
        except OSError as e:
            logger.error(f"Could not create {path}: {e}")
            raise ArtifactWriteError(str(path), str(e))

    @staticmethod
    def _write(path: Path, writer) -> None:
        try:
            writer(path)
        except OSError as e:
            logger.error(f"Could not write {path}: {e}")
            raise ArtifactWriteError(str(path), str(e))
        logger.debug(f"Wrote {path}")

    @staticmethod
    def _native_size(state: SessionState) -> Optional[list]:
        if state.image is None:
            return None
        return [state.image.native_width, state.image.native_height]

    @staticmethod
    def _rendered_size(state: SessionState) -> Optional[list]:
        if state.image is None:
            return None
        return [state.image.rendered_width, state.image.rendered_height]

import json
import logging
import numpy as np
import pandas as pd
import matplotlib
import matplotlib.pyplot as plt
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Any, List, Sequence
from sklearn.metrics import accuracy_score, confusion_matrix, precision_recall_fscore_support

from modules.base.base_engine import BaseEngine
from utils.error_handling import handle_engine_errors
from utils.exceptions import DataValidationError
from utils.file_io import save_dataframe
from utils import constants


@dataclass
class MulticlassMetrics:
    """Multiclass classification metrics for one evaluated split."""
    micro_accuracy: float
    macro_accuracy: float
    log_loss: float
    log_loss_reduction: float
    top_k: int
    top_k_accuracy: float
    macro_precision: float
    macro_recall: float
    macro_f1: float
    micro_precision: float
    micro_recall: float
    micro_f1: float
    weighted_f1: float
    n_samples: int
    classes: List[str]
    confusion_matrix: List[List[int]]
    per_class_log_loss: Dict[str, float] = field(default_factory=dict)
    per_class: Dict[str, Dict[str, float]] = field(default_factory=dict)
    unseen_label_count: int = 0

    @property
    def accuracy(self) -> float:
        return self.micro_accuracy

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def confusion_frame(self) -> pd.DataFrame:
        """Confusion counts with true labels as rows and predicted labels as columns."""
        return pd.DataFrame(self.confusion_matrix, index=self.classes, columns=self.classes)


def compute_multiclass_metrics(y_true: Sequence[str], y_pred: Sequence[str], proba: np.ndarray,
                               classes: Sequence[str], top_k: int = constants.DEFAULT_TOP_K,
                               unseen_label_count: int = 0) -> MulticlassMetrics:
    """
    Compute metrics from true labels, predicted labels and class probabilities.

    Columns of `proba` follow `classes`; every true label must be one of `classes`.
    """
    y_true = np.asarray(y_true, dtype=object)
    y_pred = np.asarray(y_pred, dtype=object)
    proba = np.asarray(proba, dtype=float)
    classes = [str(c) for c in classes]

    if len(y_true) == 0:
        raise DataValidationError("Cannot evaluate on an empty set of labelled rows.")
    if proba.shape != (len(y_true), len(classes)):
        raise DataValidationError(
            f"Probability matrix shape {proba.shape} does not match {len(y_true)} rows x {len(classes)} classes."
        )

    class_index = {c: i for i, c in enumerate(classes)}
    unknown = sorted({str(label) for label in y_true if label not in class_index})
    if unknown:
        raise DataValidationError(f"Labels not known to the model: {unknown}")
    true_idx = np.array([class_index[label] for label in y_true])

    # --- Log-loss ---
    p_true = np.clip(proba[np.arange(len(true_idx)), true_idx], constants.LOG_LOSS_EPSILON, 1.0)
    sample_losses = -np.log(p_true)
    log_loss = float(sample_losses.mean())

    counts = np.bincount(true_idx, minlength=len(classes))
    prior = counts[counts > 0] / counts.sum()
    prior_log_loss = float(-(prior * np.log(prior)).sum())
    log_loss_reduction = (prior_log_loss - log_loss) / prior_log_loss if prior_log_loss > 0 else 0.0

    per_class_log_loss = {
        c: float(sample_losses[true_idx == i].mean()) for i, c in enumerate(classes) if counts[i] > 0
    }

    # --- Top-k ---
    k = min(top_k, len(classes))
    top_k_idx = np.argsort(-proba, axis=1, kind='stable')[:, :k]
    top_k_accuracy = float((top_k_idx == true_idx[:, None]).any(axis=1).mean())

    # --- Accuracy & confusion ---
    cm = confusion_matrix(y_true, y_pred, labels=classes)
    present = counts > 0
    per_class_recall = np.diag(cm)[present] / counts[present]

    precision, recall, f1, support = precision_recall_fscore_support(
        y_true, y_pred, labels=classes, average=None, zero_division=0
    )
    macro_p, macro_r, macro_f1, _ = precision_recall_fscore_support(
        y_true, y_pred, average='macro', zero_division=0
    )
    micro_p, micro_r, micro_f1, _ = precision_recall_fscore_support(
        y_true, y_pred, labels=classes, average='micro', zero_division=0
    )
    _, _, weighted_f1, _ = precision_recall_fscore_support(
        y_true, y_pred, average='weighted', zero_division=0
    )

    per_class = {
        c: {
            'precision': float(precision[i]),
            'recall': float(recall[i]),
            'f1': float(f1[i]),
            'support': int(support[i]),
        }
        for i, c in enumerate(classes)
    }

    return MulticlassMetrics(
        micro_accuracy=float(accuracy_score(y_true, y_pred)),
        macro_accuracy=float(per_class_recall.mean()),
        log_loss=log_loss,
        log_loss_reduction=float(log_loss_reduction),
        top_k=k,
        top_k_accuracy=top_k_accuracy,
        macro_precision=float(macro_p),
        macro_recall=float(macro_r),
        macro_f1=float(macro_f1),
        micro_precision=float(micro_p),
        micro_recall=float(micro_r),
        micro_f1=float(micro_f1),
        weighted_f1=float(weighted_f1),
        n_samples=int(len(y_true)),
        classes=classes,
        confusion_matrix=cm.astype(int).tolist(),
        per_class_log_loss=per_class_log_loss,
        per_class=per_class,
        unseen_label_count=int(unseen_label_count),
    )


def empty_multiclass_metrics(classes: Sequence[str], top_k: int = constants.DEFAULT_TOP_K,
                             unseen_label_count: int = 0) -> MulticlassMetrics:
    """
    Metrics for an evaluation in which no row could be scored, either because
    the split is empty or because every label was unseen during training.

    Every skipped row counts as misclassified: accuracies and scores are 0 and
    log-loss sits at the clipping floor, -log(1e-15).
    """
    classes = [str(c) for c in classes]
    floor_loss = float(-np.log(constants.LOG_LOSS_EPSILON))
    return MulticlassMetrics(
        micro_accuracy=0.0,
        macro_accuracy=0.0,
        log_loss=floor_loss,
        log_loss_reduction=0.0,
        top_k=min(top_k, len(classes)),
        top_k_accuracy=0.0,
        macro_precision=0.0,
        macro_recall=0.0,
        macro_f1=0.0,
        micro_precision=0.0,
        micro_recall=0.0,
        micro_f1=0.0,
        weighted_f1=0.0,
        n_samples=0,
        classes=classes,
        confusion_matrix=[[0] * len(classes) for _ in classes],
        per_class={c: {'precision': 0.0, 'recall': 0.0, 'f1': 0.0, 'support': 0} for c in classes},
        unseen_label_count=int(unseen_label_count),
    )


class EvaluationEngine(BaseEngine):
    """
    Persists evaluation reports for computed metrics: a JSON summary, the
    confusion matrix as a table and as a heatmap.
    """

    def __init__(self, config: dict, logger: logging.Logger):
        super().__init__(config, logger)
        self.excel_copy = self.config.get("outputs", {}).get("save_excel_copy", False)

    def _get_engine_directory_name(self) -> str:
        return constants.EVALUATION_DIR

    def _writes_artifacts(self) -> bool:
        return self.config.get('outputs', {}).get('save_reports', True)

    @handle_engine_errors("Evaluation")
    def execute(self, metrics: MulticlassMetrics, split_name: str = "test") -> Dict[str, Path]:
        """
        Save evaluation reports.

        Returns:
            dict: Artifact name -> written path (empty when reports are disabled).
        """
        self.log_summary(metrics, split_name)
        if not self._writes_artifacts():
            return {}

        self.output_dir.mkdir(parents=True, exist_ok=True)
        paths = {}

        metrics_path = self.output_dir / f"metrics_{split_name}.json"
        with open(metrics_path, 'w') as f:
            json.dump(metrics.to_dict(), f, indent=2)
        paths['metrics'] = metrics_path

        paths['confusion_table'] = save_dataframe(
            metrics.confusion_frame(),
            self.output_dir / f"confusion_matrix_{split_name}.parquet",
            excel_copy=self.excel_copy,
            index_label=constants.LABEL_COLUMN,
        )
        paths['confusion_plot'] = self._plot_confusion_matrix(metrics, split_name)

        self.logger.info(f"Evaluation reports for {split_name} saved to {self.output_dir}")
        return paths

    def log_summary(self, metrics: MulticlassMetrics, split_name: str) -> None:
        self.logger.info(
            f"{split_name} metrics ({metrics.n_samples} rows): "
            f"MicroAccuracy={metrics.micro_accuracy:.4f}, MacroAccuracy={metrics.macro_accuracy:.4f}, "
            f"LogLoss={metrics.log_loss:.4f}, LogLossReduction={metrics.log_loss_reduction:.4f}"
        )
        if metrics.unseen_label_count:
            self.logger.warning(
                f"{metrics.unseen_label_count} {split_name} rows were skipped: label not seen during training."
            )

    def _plot_confusion_matrix(self, metrics: MulticlassMetrics, split_name: str) -> Path:
        matplotlib.use('Agg')
        cm = np.asarray(metrics.confusion_matrix)
        size = max(6, len(metrics.classes) * 0.8)

        fig, ax = plt.subplots(figsize=(size, size))
        im = ax.imshow(cm, cmap='Blues')
        fig.colorbar(im, ax=ax)
        ax.set_xticks(range(len(metrics.classes)))
        ax.set_yticks(range(len(metrics.classes)))
        ax.set_xticklabels(metrics.classes, rotation=45, ha='right')
        ax.set_yticklabels(metrics.classes)
        ax.set_xlabel('Predicted')
        ax.set_ylabel('True')
        ax.set_title(f'Confusion Matrix ({split_name})')
        for i in range(cm.shape[0]):
            for j in range(cm.shape[1]):
                ax.text(j, i, int(cm[i, j]), ha='center', va='center', color='black')
        fig.tight_layout()

        plot_path = self.output_dir / f"confusion_matrix_{split_name}.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

"""
Analysis Pipeline

Runs the stages in order on one AnalysisContext:

    load -> split -> features -> entropy -> decompose -> select_components
         -> interpret -> final_model -> effects -> group_comparison
         -> svm -> export

The run stops at the first AnalysisError; the error is tagged with the
stage it came from and re-raised.
"""

from typing import List, Tuple, Callable, Optional
import logging
import warnings
import numpy as np
import pandas as pd
from tqdm import tqdm

from analysis.errors import AnalysisError, SchemaError, InsufficientDataError
from analysis.feature_selector import FeatureSelector, FeatureRoles
from analysis.entropy import EntropyTransformer
from analysis.dimensionality import Decomposer
from analysis.component_selection import ComponentSelector
from analysis.interpretation import ComponentInterpreter, default_labels
from analysis.statistical import EffectExtractor, GroupComparison
from data.debates import DebateTable
from data.splits import TrainTestSplitter
from data.exporters import ResultsExporter
from models.linear import LinearModelFitter
from models.classifiers import create_svm
from models.evaluation import ModelEvaluator

from .config import AnalysisConfig
from .context import AnalysisContext

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Main analysis pipeline - orchestrates the whole workflow."""

    def __init__(self, config: AnalysisConfig):
        config.validate()
        self.config = config
        self.transformer = EntropyTransformer(scale=config.entropy_scale)

    @property
    def stages(self) -> List[Tuple[str, Callable[[AnalysisContext], None]]]:
        return [
            ('load', self.load_data),
            ('split', self.split_data),
            ('features', self.select_features),
            ('entropy', self.weight_features),
            ('decompose', self.decompose),
            ('select_components', self.select_components),
            ('interpret', self.interpret_components),
            ('final_model', self.fit_final_model),
            ('effects', self.extract_effects),
            ('group_comparison', self.compare_groups),
            ('svm', self.evaluate_svm),
            ('export', self.export_results),
        ]

    def run(self, context: Optional[AnalysisContext] = None) -> AnalysisContext:
        """
        Run all stages.

        Returns:
            The filled AnalysisContext

        Raises:
            AnalysisError: First data or numerical problem, tagged with its stage
        """
        context = context or AnalysisContext(config=self.config)

        for name, stage in tqdm(self.stages, desc="Pipeline", disable=not self.config.show_progress):
            context.stage = name
            logger.info(f"Stage '{name}'")
            try:
                stage(context)
            except AnalysisError as e:
                if e.stage is None:
                    e.stage = name
                logger.error(f"Pipeline halted at {e.location()}: {e.message}")
                raise
            context.completed_stages.append(name)

        context.stage = None
        return context

    # Stages

    def load_data(self, context: AnalysisContext) -> None:
        context.table = DebateTable.from_csv(self.config.data_file, **self.config.table_columns)
        logger.info(context.table.summary())

    def split_data(self, context: AnalysisContext) -> None:
        splitter = TrainTestSplitter(
            test_size=self.config.test_size,
            random_state=self.config.random_state,
            by_debate=self.config.split_by_debate
        )
        context.train, context.test = splitter.load_or_create(
            context.table, self.config.split_path, overwrite=self.config.overwrite_split
        )

    def select_features(self, context: AnalysisContext) -> None:
        roles = FeatureRoles(
            main_tag=self.config.main_tag,
            group_tag=self.config.group_tag,
            id_columns=context.train.id_columns,
            outcome_column=self.config.outcome_column,
            exclude_columns=list(self.config.exclude_columns)
        )
        context.feature_set = FeatureSelector().build_feature_set(context.train, roles)
        logger.info(f"Feature set: {context.feature_set.summary()}")

        columns = context.feature_set.group(self.config.feature_group)
        if not columns:
            raise SchemaError(
                f"No '{self.config.feature_group}' feature columns found "
                f"(main tag '{self.config.main_tag}', group tag '{self.config.group_tag}')"
            )

        if self.config.drop_degenerate_columns:
            degenerate = self.transformer.degenerate_columns(context.train, columns)
            if degenerate:
                warnings.warn(f"Dropping zero-mean column(s) before entropy weighting: {degenerate}")
                columns = [c for c in columns if c not in degenerate]
                context.dropped_columns = degenerate

        context.feature_columns = columns
        labels = default_labels(columns, self.config.main_tag)
        labels.update(self.config.feature_labels)
        context.feature_labels = labels

    def weight_features(self, context: AnalysisContext) -> None:
        context.entropy = self.transformer.transform(context.train, context.feature_columns)

    def decompose(self, context: AnalysisContext) -> None:
        context.decomposition = Decomposer().decompose(context.entropy)
        logger.debug(context.decomposition.summary())

    def select_components(self, context: AnalysisContext) -> None:
        available = context.decomposition.n_components
        max_k = self.config.max_components
        if max_k is None:
            # Largest model that still leaves one residual degree of freedom
            max_k = min(available, len(context.train) - 2)
        context.selection = ComponentSelector().select_cutoff(
            context.train.outcome, context.decomposition.U, max_k
        )
        logger.debug(context.selection.summary())

    def interpret_components(self, context: AnalysisContext) -> None:
        components = self.config.profile_components or list(range(1, context.chosen_k + 1))
        n = min(self.config.profile_size, len(context.feature_columns))
        interpreter = ComponentInterpreter(labels=context.feature_labels)
        context.profiles = interpreter.profile_all(context.decomposition.loadings, n, components)

    def fit_final_model(self, context: AnalysisContext) -> None:
        k = context.chosen_k
        scores = context.decomposition.scores.iloc[:, :k]
        context.final_model = LinearModelFitter().fit(scores, context.train.outcome)
        logger.info(f"Final model on C1..C{k}: adj R2 {context.final_model.adj_r2:.4f}")

    def extract_effects(self, context: AnalysisContext) -> None:
        extractor = EffectExtractor()
        context.significant = extractor.significant_effects(
            context.final_model, self.config.significance_level
        )
        context.trending = extractor.trending_effects(
            context.final_model, self.config.significance_level, self.config.trend_level
        )
        logger.info(f"{len(context.significant)} significant, {len(context.trending)} trending effect(s)")

    def compare_groups(self, context: AnalysisContext) -> None:
        comparison = GroupComparison(
            test=self.config.group_test,
            correction_method=self.config.correction_method,
            alpha=self.config.significance_level
        )
        context.group_comparison = comparison.compare_groups(
            context.table.df, context.table.groups, context.feature_columns
        )

    def evaluate_svm(self, context: AnalysisContext) -> None:
        if not self.config.run_svm:
            logger.info("SVM check disabled")
            return
        if context.test is None or len(context.test) == 0:
            raise InsufficientDataError("No held-out rows for the SVM check")

        k = context.chosen_k
        X_train = context.decomposition.scores.iloc[:, :k].to_numpy()
        test_matrix = self.transformer.apply_weights(context.test, context.entropy.weights)
        X_test = context.decomposition.project(test_matrix.values, n_components=k).to_numpy()

        y_train = self._svm_target(context.train)
        y_test = self._svm_target(context.test)
        if self.config.svm_task == 'classification' and len(np.unique(y_train)) < 2:
            raise InsufficientDataError(
                "SVM classification needs both gaining and losing speakers in the training rows",
                column=self.config.outcome_column
            )

        model = create_svm(self.config.svm_task, kernel=self.config.svm_kernel, C=self.config.svm_C)
        model.train(X_train, y_train, feature_names=context.decomposition.component_names[:k])
        context.svm_metrics = ModelEvaluator().evaluate(model, X_test, y_test)

    def _svm_target(self, table: DebateTable) -> np.ndarray:
        if self.config.svm_task == 'classification':
            return np.where(table.outcome.to_numpy() > 0, 'gain', 'loss')
        return table.outcome.to_numpy()

    def export_results(self, context: AnalysisContext) -> None:
        context.outputs = ResultsExporter(
            self.config.output_dir, excel=self.config.export_excel
        ).export(self.report_tables(context))

    def report_tables(self, context: AnalysisContext) -> dict:
        """Every report table by name."""
        extractor = EffectExtractor()
        weights = context.entropy.weights
        tables = {
            'model_selection': context.selection.to_frame(),
            'entropy_weights': pd.DataFrame({
                'feature': weights.index,
                'label': [context.feature_labels.get(f, f) for f in weights.index],
                'weight': weights.to_numpy()
            }),
            'singular_values': context.decomposition.singular_value_table(),
            'component_profiles': pd.concat(
                [p.to_frame() for p in context.profiles], ignore_index=True
            ),
            'final_model': context.final_model.coefficients,
            'effects': extractor.effects_frame(
                context.final_model, self.config.significance_level, self.config.trend_level
            ),
        }
        if context.group_comparison is not None:
            tables['group_comparison'] = context.group_comparison
        if context.svm_metrics:
            tables['svm_metrics'] = ModelEvaluator.to_frame(context.svm_metrics, self.config.svm_task)
        return tables

"""
Feature engineering for element attributes.

Each of the eight attribute columns runs through its own text featurizer
(hashed word and character n-grams, TF-IDF weighted), and the per-column
vectors are concatenated into one sparse 'Features' matrix. The column order
is fixed; the fitted transformer is persisted with the model so inference
replays exactly the same transform chain.
"""
import pandas as pd
from typing import Dict, Any
from sklearn.compose import ColumnTransformer
from sklearn.feature_extraction.text import HashingVectorizer, TfidfTransformer
from sklearn.pipeline import Pipeline, FeatureUnion

from utils import constants

DEFAULT_FEATURE_PARAMS = {
    'word_ngram_range': (1, 2),
    'char_ngram_range': (3, 3),
    'n_features': 4096,
    'lowercase': True,
}


def resolve_feature_params(config: dict) -> Dict[str, Any]:
    """Merge the 'features' config section over the defaults."""
    overrides = config.get('features', {})
    params = {key: overrides.get(key, default) for key, default in DEFAULT_FEATURE_PARAMS.items()}
    params['word_ngram_range'] = tuple(params['word_ngram_range'])
    params['char_ngram_range'] = tuple(params['char_ngram_range'])
    return params


def build_text_featurizer(word_ngram_range=(1, 2), char_ngram_range=(3, 3),
                          n_features: int = 4096, lowercase: bool = True) -> Pipeline:
    """
    Text -> numeric vector for a single column.

    Hashing keeps the width fixed and tolerates columns that are empty in the
    training data (no vocabulary to fit). alternate_sign is off so the output
    stays non-negative for count-based classifiers.
    """
    return Pipeline([
        ('ngrams', FeatureUnion([
            ('words', HashingVectorizer(
                analyzer='word',
                ngram_range=word_ngram_range,
                n_features=n_features,
                lowercase=lowercase,
                alternate_sign=False,
                norm=None,
            )),
            ('chars', HashingVectorizer(
                analyzer='char_wb',
                ngram_range=char_ngram_range,
                n_features=n_features,
                lowercase=lowercase,
                alternate_sign=False,
                norm=None,
            )),
        ])),
        ('tfidf', TfidfTransformer(norm='l2', sublinear_tf=False)),
    ])


def build_feature_pipeline(feature_params: Dict[str, Any] = None) -> ColumnTransformer:
    """
    Build the concatenating transformer over all attribute columns.

    Output blocks appear in FEATURE_COLUMNS order, named '<Column>Featurized'.
    """
    params = {**DEFAULT_FEATURE_PARAMS, **(feature_params or {})}
    transformers = [
        (f"{column}{constants.FEATURIZED_SUFFIX}", build_text_featurizer(**params), column)
        for column in constants.FEATURE_COLUMNS
    ]
    return ColumnTransformer(transformers, remainder='drop', sparse_threshold=1.0)


def prepare_features(df: pd.DataFrame) -> pd.DataFrame:
    """Select the attribute columns as clean strings, in featurization order."""
    return df[constants.FEATURE_COLUMNS].fillna('').astype(str)

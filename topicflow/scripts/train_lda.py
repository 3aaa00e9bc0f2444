#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""This script fits an LDA topic model to a plain text file holding one document per line.

It writes two files:

* <PREFIX>_wordids.txt - the vocabulary, one `id<TAB>term<TAB>document frequency` per line,
* <PREFIX>.lda - the trained model, loadable with :meth:`topicflow.models.LdaModel.load`,

and prints the topics, the training perplexity and the topic coherence.
Input and output paths may be compressed (`.gz`, `.bz2`) or remote, anything `smart_open` understands.

How to use
----------

.. sourcecode:: bash

    python -m topicflow.scripts.train_lda -i docs.txt.gz -o out/docs -k 10 --passes 20 --seed 42

Command line arguments
----------------------

.. program-output:: python -m topicflow.scripts.train_lda --help
   :ellipsis: 0, -5

"""

import argparse
import logging
import os.path
import sys

from topicflow import utils
from topicflow.pipeline import TopicPipeline

logger = logging.getLogger(__name__)


def _prior(value):
    """A Dirichlet prior from the command line: a positive number or the name of a strategy."""
    try:
        return float(value)
    except ValueError:
        return value


def _frequency(value):
    """A document frequency bound: an int is an absolute count, anything with a decimal point a fraction."""
    return float(value) if '.' in value else int(value)


def read_documents(fname):
    """Yield `(line_number, text)` for every line of `fname`."""
    with utils.open(fname, 'rb') as fin:
        for lineno, line in enumerate(fin):
            yield lineno, utils.to_unicode(line).rstrip('\r\n')


def build_parser():
    parser = argparse.ArgumentParser(
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Fit an LDA topic model to a text file holding one document per line."
    )
    parser.add_argument("-i", "--input", required=True, help="Input text file, one document per line.")
    parser.add_argument("-o", "--output", required=True, help="Prefix for output files.")
    parser.add_argument("-k", "--num-topics", type=int, default=10, help="Number of topics. Default: %(default)s")
    parser.add_argument("--passes", type=int, default=10, help="Passes over the corpus. Default: %(default)s")
    parser.add_argument("--chunk-size", type=int, default=2000, help="Mini-batch size. Default: %(default)s")
    parser.add_argument("--seed", type=int, default=None, help="Random seed, for reproducible models.")
    parser.add_argument("--tolerance", type=float, default=0.0,
                        help="Stop early when the relative change of the training perplexity is below this.")
    parser.add_argument("--alpha", type=_prior, default='symmetric',
                        help="Document-topic prior: a number, 'symmetric', 'asymmetric' or 'auto'.")
    parser.add_argument("--eta", type=_prior, default='symmetric',
                        help="Topic-term prior: a number, 'symmetric' or 'auto'.")
    parser.add_argument("--min-df", type=_frequency, default=None,
                        help="Drop terms in fewer documents (int) or a smaller fraction of documents (float).")
    parser.add_argument("--max-df", type=_frequency, default=None,
                        help="Drop terms in more documents (int) or a larger fraction of documents (float).")
    parser.add_argument("--keep-n", type=int, default=None, help="Keep only this many most frequent terms.")
    parser.add_argument("--stemmer", default='porter', choices=['porter', 'snowball', 'none'],
                        help="Token stemmer. Default: %(default)s")
    parser.add_argument("--coherence", default='u_mass', choices=['u_mass', 'c_uci', 'c_npmi'],
                        help="Coherence measure. Default: %(default)s")
    parser.add_argument("--top-n", type=int, default=10, help="Terms printed per topic. Default: %(default)s")
    parser.add_argument("--workers", type=int, default=1, help="E-step worker processes. Default: %(default)s")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    options = {
        'num_topics': args.num_topics,
        'alpha': args.alpha,
        'eta': args.eta,
        'max_passes': args.passes,
        'chunk_size': args.chunk_size,
        'random_seed': args.seed,
        'convergence_tolerance': args.tolerance,
        'min_df': args.min_df,
        'max_df': args.max_df,
        'keep_n': args.keep_n,
        'stemmer': None if args.stemmer == 'none' else args.stemmer,
        'coherence_measure': args.coherence,
        'top_n': args.top_n,
        'workers': args.workers,
    }
    pipeline = TopicPipeline.from_options(options)
    result = pipeline.run(read_documents(args.input))

    result.vocabulary.save_as_text(args.output + '_wordids.txt')
    result.model.save(args.output + '.lda')

    for topic_index, terms in result.topics:
        print("topic #%i: %s" % (topic_index, ' '.join(terms)))
    print("perplexity: %.4f" % result.perplexity)
    print("%s coherence: %.4f" % (args.coherence, result.coherence))
    return result


if __name__ == '__main__':
    logging.basicConfig(format='%(asctime)s : %(levelname)s : %(message)s', level=logging.INFO)
    logger.info("running %s", " ".join(sys.argv))

    main(sys.argv[1:])

    logger.info("finished running %s", os.path.basename(sys.argv[0]))

#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""Online Latent Dirichlet Allocation (LDA) with mini-batch variational Bayes.

This module estimates an LDA model from an in-memory bag-of-words corpus, and infers the topic distribution
of new, unseen documents encoded against the same vocabulary.

The estimation follows **Hoffman, Blei, Bach: Online Learning for Latent Dirichlet Allocation, NIPS 2010**.
Every pass iterates the corpus in mini-batches of `chunk_size` documents:

* the E-step holds the topics fixed and iterates each document's variational Dirichlet `gamma` to a fixed point,
  collecting the expected topic-term counts of the mini-batch,
* the M-step blends those counts into the topic-term statistics with weight `rho_t = (offset + t) ** -decay`,
  `t` being the number of mini-batches already merged, see :func:`blend`.

The E-step of a mini-batch may be split over several worker processes (`workers > 1`). The workers only
return partial statistics; the parent sums them in job order and performs the single merge, so the model
is never written from more than one place.

Examples
--------
.. sourcecode:: pycon

    >>> from topicflow.models.ldamodel import fit
    >>> from topicflow.test.utils import common_corpus, common_vocabulary
    >>>
    >>> lda = fit(common_corpus, num_topics=2, alpha=0.1, eta=0.1, config={'random_seed': 1, 'max_passes': 20})
    >>> theta = lda.document_topic_distribution(common_corpus[0])
    >>> lda.top_terms(0, 3)  # doctest: +SKIP
    ['system', 'user', 'eps']

"""

import logging
import multiprocessing
import numbers
import warnings

import numpy as np
from scipy.special import gammaln, psi  # gamma function utils
from scipy.special import polygamma

from topicflow import utils, matutils
from topicflow.config import TrainingConfig
from topicflow.exceptions import InvalidConfiguration, NumericalGuardTriggered
from topicflow.matutils import dirichlet_expectation, logsumexp, mean_absolute_difference
from topicflow.models import basemodel


logger = logging.getLogger(__name__)

DTYPE_TO_EPS = {
    np.float16: 1e-5,
    np.float32: 1e-35,
    np.float64: 1e-100,
}


def update_dir_prior(prior, N, logphat, rho):
    """Update a given prior using Newton's method, described in
    **Huang: Maximum Likelihood Estimation of Dirichlet Distribution Parameters.**

    Returns a new array; `prior` itself is left untouched. If the step would make any component
    non-positive, the old prior is returned unchanged.

    """
    gradf = N * (psi(np.sum(prior)) - psi(prior) + logphat)

    c = N * polygamma(1, np.sum(prior))
    q = -N * polygamma(1, prior)

    b = np.sum(gradf / q) / (1 / c + np.sum(1 / q))

    dprior = -(gradf - b) / q

    updated = prior + rho * dprior
    if np.all(updated > 0):
        return updated.astype(prior.dtype, copy=False)
    logger.warning("updated prior is not positive, keeping the previous value")
    return prior.copy()


def blend(sstats, batch_sstats, rho, corpus_size, batch_size):
    """Blend the expected topic-term counts of one mini-batch into the running statistics.

    Computes `(1 - rho) * sstats + rho * (corpus_size / batch_size) * batch_sstats`: the mini-batch counts
    are stretched to the size of the whole corpus, then interpolated with the previous estimate.
    `rho=1.0` replaces the estimate, `rho=0.0` ignores the mini-batch. This is the stochastic natural
    gradient step of Hoffman et al., algorithm 2 (eq. 14).

    Parameters
    ----------
    sstats : numpy.ndarray
        Current statistics, shape (`num_topics`, `num_terms`). Not modified.
    batch_sstats : numpy.ndarray
        Statistics collected from the mini-batch, same shape. Not modified.
    rho : float
        Weight of the mini-batch, in [0, 1].
    corpus_size : int
        Number of documents in the whole corpus.
    batch_size : int
        Number of documents in the mini-batch.

    Returns
    -------
    numpy.ndarray
        New statistics matrix.

    """
    scale = float(corpus_size) / batch_size
    result = (1.0 - rho) * sstats + (rho * scale) * batch_sstats
    return result.astype(sstats.dtype, copy=False)


def e_step(chunk, gamma, alpha, exp_elogbeta, iterations, gamma_threshold, eps, collect_sstats=True):
    """Estimate the variational `gamma` of every document in `chunk` with the topics held fixed.

    Avoids computing the `phi` variational parameter directly using the
    optimization presented in **Lee, Seung: Algorithms for non-negative matrix factorization, NIPS 2001**.
    This function has no side effects, so it can run in a worker process.

    Parameters
    ----------
    chunk : list of list of (int, int)
        Bag-of-words documents.
    gamma : numpy.ndarray
        Initial `gamma`, shape (`len(chunk)`, `num_topics`). Not modified.
    alpha : numpy.ndarray
        Document-topic prior, length `num_topics`.
    exp_elogbeta : numpy.ndarray
        `exp(E[log beta])` of the current topics, shape (`num_topics`, `num_terms`).
    iterations : int
        Maximum number of fixed-point iterations per document.
    gamma_threshold : float
        Stop iterating a document once the mean absolute change of its `gamma` is below this.
    eps : float
        Smoothing constant added to the `phi` normalizer.
    collect_sstats : bool, optional
        Collect the expected topic-term counts?

    Returns
    -------
    (numpy.ndarray, numpy.ndarray or None, int, int)
        Final `gamma`, the expected counts (or None), the number of documents that converged before
        `iterations`, and the number of normalizer values that fell below `eps`.

    """
    dtype = exp_elogbeta.dtype
    gamma = np.array(gamma, dtype=dtype)
    expElogtheta = np.exp(dirichlet_expectation(gamma))

    if collect_sstats:
        sstats = np.zeros(exp_elogbeta.shape, dtype=dtype)
    else:
        sstats = None
    converged = 0
    guards = 0

    for d, doc in enumerate(chunk):
        if len(doc) == 0:
            # no words: the posterior is the prior, nothing to collect
            gamma[d, :] = alpha
            continue
        ids = [int(idx) for idx, _ in doc]
        cts = np.array([cnt for _, cnt in doc], dtype=dtype)
        gammad = gamma[d, :]
        expElogthetad = expElogtheta[d, :]
        expElogbetad = exp_elogbeta[:, ids]

        # The optimal phi_{dwk} is proportional to expElogthetad_k * expElogbetad_w.
        # phinorm is the normalizer.
        rawnorm = np.dot(expElogthetad, expElogbetad)
        phinorm = rawnorm + eps

        for _ in range(iterations):
            lastgamma = gammad
            # Substituting the value of the optimal phi back into
            # the update for gamma gives this update. Cf. Lee&Seung 2001.
            gammad = alpha + expElogthetad * np.dot(cts / phinorm, expElogbetad.T)
            expElogthetad = np.exp(dirichlet_expectation(gammad))
            rawnorm = np.dot(expElogthetad, expElogbetad)
            phinorm = rawnorm + eps
            if mean_absolute_difference(gammad, lastgamma) < gamma_threshold:
                converged += 1
                break
        guards += int(np.count_nonzero(rawnorm < eps))
        gamma[d, :] = gammad
        if collect_sstats:
            # Contribution of document d to the expected sufficient statistics for the M step.
            sstats[:, ids] += np.outer(expElogthetad.T, cts / phinorm)

    if collect_sstats:
        # sstats[k, w] = \sum_d n_{dw} * phi_{dwk}
        # = \sum_d n_{dw} * exp{Elogtheta_{dk} + Elogbeta_{kw}} / phinorm_{dw}.
        sstats *= exp_elogbeta

    return gamma, sstats, converged, guards


def _e_step_job(job):
    """Unpack a job tuple for :meth:`multiprocessing.pool.Pool.map`."""
    return e_step(*job)


class LdaState(utils.SaveLoad):
    """Variational parameters of the topics: `lambda = eta + sstats`.

    `sstats` is replaced wholesale by every M-step, never updated in place.

    """
    def __init__(self, eta, sstats):
        self.eta = eta
        self.sstats = sstats
        self.dtype = sstats.dtype

    def get_lambda(self):
        return self.eta + self.sstats

    def get_Elogbeta(self):
        return dirichlet_expectation(self.get_lambda())

    def freeze(self):
        matutils.read_only(self.eta)
        matutils.read_only(self.sstats)
        return self


class LdaModel(utils.SaveLoad, basemodel.BaseTopicModel):
    """Latent Dirichlet Allocation model trained with online variational Bayes.

    Prefer :func:`~topicflow.models.ldamodel.fit`, which validates everything before any work starts
    and returns a frozen model.

    Attributes
    ----------
    perplexity_history : list of float
        Training perplexity after every pass.
    diagnostics : dict
        `empty_documents`: number of training documents without any word;
        `numerical_guards`: how many times the `phi` normalizer fell below the smoothing constant.
    num_updates : int
        Number of mini-batches merged into the topics.

    """
    def __init__(self, corpus=None, num_topics=100, id2word=None, alpha='symmetric', eta='symmetric',
                 config=None, minimum_probability=0.01):
        """

        Parameters
        ----------
        corpus : iterable of list of (int, int), optional
            Training corpus. If given, training starts straight away and the model is frozen afterwards.
        num_topics : int, optional
            Number of requested latent topics.
        id2word : {dict of (int, str), :class:`~topicflow.corpora.Vocabulary`}, optional
            Mapping from term ids to terms, used to determine the vocabulary size and to print topics.
            If None, taken from `corpus.vocabulary` or inferred from the largest term id in `corpus`.
        alpha : {float, sequence of float, str}, optional
            Document-topic prior: a positive scalar, a vector of length `num_topics`, 'symmetric' (1 / num_topics),
            'asymmetric' (normalized 1 / (topic_index + sqrt(num_topics))) or 'auto' (learned from the corpus).
        eta : {float, sequence of float, str}, optional
            Topic-term prior: a positive scalar, a vector of length `num_terms`, 'symmetric' (1 / num_topics)
            or 'auto'.
        config : {:class:`~topicflow.config.TrainingConfig`, dict}, optional
            Training options.
        minimum_probability : float, optional
            Topics with a lower probability are left out of :meth:`get_document_topics` output.

        Raises
        ------
        :class:`~topicflow.exceptions.InvalidConfiguration`
            For any invalid option or prior, an empty vocabulary, or an empty `corpus`.

        """
        self.config = TrainingConfig.coerce(config)
        self.dtype = np.dtype(self.config.dtype).type
        self.eps = DTYPE_TO_EPS[self.dtype]

        if isinstance(num_topics, bool) or not isinstance(num_topics, numbers.Integral) or num_topics < 1:
            raise InvalidConfiguration("num_topics must be an int >= 1, got %r" % (num_topics,))
        self.num_topics = int(num_topics)

        documents = None
        if corpus is not None:
            documents = [list(doc) for doc in corpus]
            if not documents:
                raise InvalidConfiguration("cannot train LDA on an empty corpus")
            if id2word is None:
                id2word = getattr(corpus, 'vocabulary', None)

        if id2word is None:
            if documents is None:
                raise InvalidConfiguration(
                    "at least one of corpus/id2word must be specified, to establish input space dimensionality"
                )
            logger.warning("no word id mapping provided; initializing from corpus, assuming identity")
            num_terms = 1 + max((int(idx) for doc in documents for idx, _ in doc), default=-1)
            id2word = {idx: str(idx) for idx in range(num_terms)}
        self.id2word = id2word
        self.num_terms = len(id2word)
        if self.num_terms == 0:
            raise InvalidConfiguration("cannot compute LDA over an empty vocabulary (no terms)")

        if documents is not None:
            for docno, doc in enumerate(documents):
                for idx, cnt in doc:
                    if not 0 <= int(idx) < self.num_terms:
                        raise InvalidConfiguration(
                            "document #%i contains term id %s outside the vocabulary of %i terms"
                            % (docno, idx, self.num_terms)
                        )
                    if cnt < 0:
                        raise InvalidConfiguration("document #%i has a negative count for term id %s" % (docno, idx))

        self.minimum_probability = minimum_probability
        self.alpha, self.optimize_alpha = self.init_dir_prior(alpha, 'alpha')
        self.eta, self.optimize_eta = self.init_dir_prior(eta, 'eta')

        self.random_state = utils.get_random_state(self.config.random_seed)

        # Initialize the variational distribution q(beta|lambda)
        sstats = self.random_state.gamma(100., 1. / 100., (self.num_topics, self.num_terms)).astype(self.dtype)
        self.state = LdaState(self.eta, sstats)
        self.expElogbeta = np.exp(self.state.get_Elogbeta())

        self.perplexity_history = []
        self.diagnostics = {'empty_documents': 0, 'numerical_guards': 0}
        self.num_updates = 0
        self.frozen = False

        if documents is not None:
            self.update(documents)
            self.freeze()

    def init_dir_prior(self, prior, name):
        """Turn a user-supplied Dirichlet prior into a positive vector of the right length.

        Returns
        -------
        (numpy.ndarray, bool)
            The prior and whether it should be learned from the data ('auto').

        """
        if prior is None:
            prior = 'symmetric'

        if name == 'alpha':
            prior_shape = self.num_topics
        elif name == 'eta':
            prior_shape = self.num_terms
        else:
            raise ValueError("'name' must be 'alpha' or 'eta'")

        is_auto = False

        if isinstance(prior, str):
            if prior == 'symmetric':
                logger.info("using symmetric %s at %s", name, 1.0 / self.num_topics)
                init_prior = np.full(prior_shape, 1.0 / self.num_topics, dtype=self.dtype)
            elif prior == 'asymmetric':
                if name == 'eta':
                    raise InvalidConfiguration("the 'asymmetric' option cannot be used for eta")
                init_prior = np.asarray([1.0 / (i + np.sqrt(prior_shape)) for i in range(prior_shape)], dtype=self.dtype)
                init_prior /= init_prior.sum()
                logger.info("using asymmetric %s %s", name, list(init_prior))
            elif prior == 'auto':
                is_auto = True
                init_prior = np.full(prior_shape, 1.0 / self.num_topics, dtype=self.dtype)
                logger.info("using autotuned %s, starting with %s", name, 1.0 / self.num_topics)
            else:
                raise InvalidConfiguration("unable to determine proper %s value given %r" % (name, prior))
        elif isinstance(prior, (list, tuple, np.ndarray)):
            init_prior = np.array(prior, dtype=self.dtype)
            if init_prior.shape != (prior_shape,):
                raise InvalidConfiguration(
                    "invalid %s shape, got %s but expected (%d,)" % (name, init_prior.shape, prior_shape)
                )
        elif isinstance(prior, (numbers.Real, np.number)) and not isinstance(prior, bool):
            init_prior = np.full(prior_shape, prior, dtype=self.dtype)
        else:
            raise InvalidConfiguration("%s must be either a np array of scalars, list of scalars, or scalar" % name)

        if not np.all(np.isfinite(init_prior)) or not np.all(init_prior > 0):
            raise InvalidConfiguration("every component of %s must be a finite number > 0, got %r" % (name, prior))
        return init_prior, is_auto

    def __str__(self):
        return "%s<num_terms=%s, num_topics=%s, decay=%s, chunk_size=%s>" % (
            self.__class__.__name__, self.num_terms, self.num_topics, self.config.decay, self.config.chunk_size
        )

    def sync_state(self):
        self.expElogbeta = np.exp(self.state.get_Elogbeta())

    def freeze(self):
        """Make the model read-only: training stops being possible and the arrays become non-writeable."""
        self.state.freeze()
        for attrib in ('alpha', 'eta', 'expElogbeta'):
            matutils.read_only(getattr(self, attrib))
        self.frozen = True
        return self

    def _initial_gamma(self, chunk):
        """Deterministic starting point of inference: the prior plus an even share of the document's words."""
        lengths = np.array([sum(cnt for _, cnt in doc) for doc in chunk], dtype=self.dtype)
        return self.alpha[np.newaxis, :] + (lengths / self.num_topics)[:, np.newaxis]

    def inference(self, chunk, collect_sstats=False):
        """Estimate `gamma` (parameters controlling the topic weights) for each document in `chunk`.

        This function does not modify the model and does not draw random numbers, so it is safe to call
        from several threads at once.

        Parameters
        ----------
        chunk : list of list of (int, int)
            Bag-of-words documents.
        collect_sstats : bool, optional
            Also collect the expected topic-term counts of `chunk`?

        Returns
        -------
        (numpy.ndarray, numpy.ndarray or None)
            `gamma` of shape (`len(chunk)`, `num_topics`), and the counts if `collect_sstats` is True.

        """
        chunk = [list(doc) for doc in chunk]
        if len(chunk) > 1:
            logger.debug("performing inference on a chunk of %i documents", len(chunk))
        gamma, sstats, converged, _ = e_step(
            chunk, self._initial_gamma(chunk), self.alpha, self.expElogbeta,
            self.config.iterations, self.config.gamma_threshold, self.eps, collect_sstats=collect_sstats,
        )
        if len(chunk) > 1:
            logger.debug("%i/%i documents converged within %i iterations", converged, len(chunk), self.config.iterations)
        return gamma, sstats

    def _batch_estep(self, chunk, pool):
        """E-step of one training mini-batch, spread over `pool` if given. Returns `(gamma, sstats)`."""
        gamma = self.random_state.gamma(100., 1. / 100., (len(chunk), self.num_topics)).astype(self.dtype)
        args = (self.alpha, self.expElogbeta, self.config.iterations, self.config.gamma_threshold, self.eps)
        if pool is None:
            results = [e_step(chunk, gamma, *args)]
        else:
            bounds = utils.split_evenly(list(range(len(chunk))), self.config.workers)
            jobs = [(chunk[part[0]:part[-1] + 1], gamma[part[0]:part[-1] + 1]) + args for part in bounds]
            logger.debug("dispatching %i jobs of a mini-batch of %i documents", len(jobs), len(chunk))
            results = pool.map(_e_step_job, jobs)

        # reduce the partial statistics in job order
        sstats = np.zeros(self.expElogbeta.shape, dtype=self.dtype)
        converged = 0
        for _, part_sstats, part_converged, part_guards in results:
            sstats += part_sstats
            converged += part_converged
            self.diagnostics['numerical_guards'] += part_guards
        gamma = np.concatenate([part_gamma for part_gamma, _, _, _ in results])
        logger.debug("%i/%i documents converged within %i iterations", converged, len(chunk), self.config.iterations)
        return gamma, sstats

    def update_alpha(self, gammat, rho):
        """Update the Dirichlet prior on the per-document topic weights `alpha` given the last `gammat`."""
        N = float(len(gammat))
        logphat = sum(dirichlet_expectation(gamma) for gamma in gammat) / N
        self.alpha = update_dir_prior(self.alpha, N, logphat, rho)
        logger.info("optimized alpha %s", list(self.alpha))
        return self.alpha

    def update_eta(self, lambdat, rho):
        """Update the Dirichlet prior on the per-topic term weights `eta` given the last `lambdat`."""
        N = float(lambdat.shape[0])
        logphat = (sum(dirichlet_expectation(lambda_) for lambda_ in lambdat) / N).reshape((self.num_terms,))
        self.eta = update_dir_prior(self.eta, N, logphat, rho)
        self.state.eta = self.eta
        return self.eta

    def rho(self):
        """Weight of the next mini-batch: `(offset + t) ** -decay`, `t` mini-batches merged so far."""
        return pow(self.config.offset + self.num_updates, -self.config.decay)

    def do_mstep(self, rho, batch_sstats, batch_size, corpus_size):
        """Merge one mini-batch into the topics. The only place the topic statistics change."""
        logger.debug("updating topics")
        diff = np.log(self.expElogbeta)
        self.state.sstats = blend(self.state.sstats, batch_sstats, rho, corpus_size, batch_size)
        if self.optimize_eta:
            self.update_eta(self.state.get_lambda(), rho)
        self.sync_state()
        diff -= np.log(self.expElogbeta)
        logger.debug("topic diff=%f, rho=%f", np.mean(np.abs(diff)), rho)
        self.num_updates += 1

    def update(self, corpus):
        """Train the model on `corpus`, for `max_passes` passes or until the training perplexity converges.

        Parameters
        ----------
        corpus : list of list of (int, int)
            In-memory bag-of-words corpus.

        Raises
        ------
        RuntimeError
            If the model is frozen.

        """
        if self.frozen:
            raise RuntimeError("%s is frozen, fit a new model instead of updating this one" % self.__class__.__name__)
        from topicflow.models.evaluation import perplexity

        documents = [list(doc) for doc in corpus]
        lencorpus = len(documents)
        if lencorpus == 0:
            raise InvalidConfiguration("cannot train LDA on an empty corpus")
        config = self.config
        chunksize = min(lencorpus, config.chunk_size)
        corpus_words = sum(cnt for doc in documents for _, cnt in doc)

        self.diagnostics['empty_documents'] = sum(1 for doc in documents if not doc)
        if self.diagnostics['empty_documents']:
            logger.warning(
                "%i out of %i documents have no words; they keep the prior and contribute nothing",
                self.diagnostics['empty_documents'], lencorpus
            )

        updates_per_pass = -(-lencorpus // chunksize)
        logger.info(
            "running online LDA training, %s topics, %i passes over the supplied corpus of %i documents, "
            "updating model once every %i documents, using %i worker(s), "
            "iterating %ix with a convergence threshold of %f",
            self.num_topics, config.max_passes, lencorpus, chunksize, config.workers,
            config.iterations, config.gamma_threshold
        )
        if updates_per_pass * config.max_passes < 10:
            logger.warning(
                "too few updates, training might not converge; "
                "consider increasing the number of passes or iterations to improve accuracy"
            )

        pool = multiprocessing.Pool(config.workers) if config.workers > 1 else None
        try:
            for pass_ in range(config.max_passes):
                for chunk_no, chunk in enumerate(utils.grouper(documents, chunksize)):
                    logger.debug(
                        "PROGRESS: pass %i, at document #%i/%i",
                        pass_, chunk_no * chunksize + len(chunk), lencorpus
                    )
                    rho = self.rho()
                    gammat, batch_sstats = self._batch_estep(chunk, pool)
                    if self.optimize_alpha:
                        self.update_alpha(gammat, rho)
                    self.do_mstep(rho, batch_sstats, len(chunk), lencorpus)

                if corpus_words:
                    current = perplexity(self, documents)
                else:
                    current = float('nan')
                self.perplexity_history.append(current)
                logger.info("pass %i: training perplexity %.3f after %i updates", pass_, current, self.num_updates)

                if config.convergence_tolerance > 0 and len(self.perplexity_history) > 1:
                    previous = self.perplexity_history[-2]
                    change = abs(previous - current) / previous
                    if change < config.convergence_tolerance:
                        logger.info(
                            "converged after pass %i: relative perplexity change %.6f < %s",
                            pass_, change, config.convergence_tolerance
                        )
                        break
        finally:
            if pool is not None:
                pool.close()
                pool.join()

        if self.diagnostics['numerical_guards']:
            logger.warning(
                "the phi normalizer fell below %g %i times; smoothing kept the estimates finite",
                self.eps, self.diagnostics['numerical_guards']
            )
            warnings.warn(
                "smoothing constant %g was needed %i times during training"
                % (self.eps, self.diagnostics['numerical_guards']),
                NumericalGuardTriggered, stacklevel=2,
            )
        self.print_topics(5)

    def topic_term_distribution(self):
        """Get the topic-term matrix `phi`, shape (`num_topics`, `num_terms`). Every row sums to 1.

        Returns a new array; modifying it does not affect the model.

        """
        return matutils.normalize_rows(self.state.get_lambda())

    def get_topics(self):
        return self.topic_term_distribution()

    def document_topic_distribution(self, bow):
        """Get the topic distribution `theta` of one bag-of-words document, a length `num_topics` array summing to 1.

        Documents without any word get the uniform distribution.

        """
        bow = list(bow)
        if not bow or sum(cnt for _, cnt in bow) == 0:
            return np.full(self.num_topics, 1.0 / self.num_topics)
        gamma, _ = self.inference([bow])
        return gamma[0] / gamma[0].sum()

    def log_perplexity(self, chunk, total_docs=None):
        """Calculate and return the per-word likelihood bound, using `chunk` as evaluation corpus.

        Also logs the perplexity estimate `2 ** -bound` at INFO level.

        """
        chunk = [list(doc) for doc in chunk]
        if total_docs is None:
            total_docs = len(chunk)
        corpus_words = sum(cnt for document in chunk for _, cnt in document)
        subsample_ratio = 1.0 * total_docs / len(chunk)
        perwordbound = self.bound(chunk, subsample_ratio=subsample_ratio) / (subsample_ratio * corpus_words)
        logger.info(
            "%.3f per-word bound, %.1f perplexity estimate based on a held-out corpus of %i documents with %i words",
            perwordbound, np.exp2(-perwordbound), len(chunk), corpus_words
        )
        return perwordbound

    def bound(self, corpus, gamma=None, subsample_ratio=1.0):
        """Estimate the variational bound of documents from `corpus`: E_q[log p(corpus)] - E_q[log q(corpus)].

        Parameters
        ----------
        corpus : iterable of list of (int, int)
            Documents to infer variational bounds from.
        gamma : numpy.ndarray, optional
            Topic weight variational parameters for each document. If not supplied, they are inferred.
        subsample_ratio : float, optional
            Proportion of the whole corpus represented by `corpus`, used to scale the likelihood.

        Returns
        -------
        float

        """
        score = 0.0
        _lambda = self.state.get_lambda()
        Elogbeta = dirichlet_expectation(_lambda)

        for d, doc in enumerate(corpus):
            if d % self.config.chunk_size == 0:
                logger.debug("bound: at document #%i", d)
            if gamma is None:
                gammad, _ = self.inference([doc])
                gammad = gammad[0]
            else:
                gammad = gamma[d]
            Elogthetad = dirichlet_expectation(gammad)

            # E[log p(doc | theta, beta)]
            score += sum(cnt * logsumexp(Elogthetad + Elogbeta[:, int(id_)]) for id_, cnt in doc)

            # E[log p(theta | alpha) - log q(theta | gamma)]
            score += np.sum((self.alpha - gammad) * Elogthetad)
            score += np.sum(gammaln(gammad) - gammaln(self.alpha))
            score += gammaln(np.sum(self.alpha)) - gammaln(np.sum(gammad))

        # Compensate likelihood for when `corpus` above is only a sample of the whole corpus.
        score *= subsample_ratio

        # E[log p(beta | eta) - log q (beta | lambda)]
        score += np.sum((self.eta - _lambda) * Elogbeta)
        score += np.sum(gammaln(_lambda) - gammaln(self.eta))
        score += np.sum(gammaln(np.sum(self.eta)) - gammaln(np.sum(_lambda, 1)))

        return float(score)

    def show_topics(self, num_topics=10, num_words=10, log=False, formatted=True):
        """Get the most significant terms of `num_topics` topics.

        Unlike LSA, there is no natural ordering between the topics in LDA; when fewer topics than
        `self.num_topics` are requested, topics with the smallest and the largest `alpha` are shown.

        Parameters
        ----------
        num_topics : int, optional
            Number of topics to show, -1 for all.
        num_words : int, optional
            Number of terms per topic.
        log : bool, optional
            Also log the topics at INFO level?
        formatted : bool, optional
            Format each topic as a string, instead of a list of `(term, probability)`.

        Returns
        -------
        list of (int, {str, list of (str, float)})

        """
        if num_topics == 0:
            return []
        if num_topics < 0 or num_topics >= self.num_topics:
            chosen_topics = range(self.num_topics)
        else:
            sorted_topics = list(matutils.argsort(self.alpha))
            chosen_topics = sorted_topics[:num_topics // 2] + sorted_topics[-(num_topics - num_topics // 2):]

        shown = []
        for i in chosen_topics:
            topic_ = self.show_topic(i, num_words)
            if formatted:
                topic_ = ' + '.join('%.3f*"%s"' % (v, k) for k, v in topic_)
            shown.append((int(i), topic_))
            if log:
                logger.info("topic #%i (%.3f): %s", i, self.alpha[i], topic_)
        return shown

    def get_document_topics(self, bow, minimum_probability=None):
        """Get the topic distribution of a document as sparse `(topic_id, probability)` pairs.

        Parameters
        ----------
        bow : {list of (int, int), iterable of list of (int, int)}
            Bag-of-words document, or a corpus of them.
        minimum_probability : float, optional
            Leave out topics with a lower probability. Never below 1e-8.

        Returns
        -------
        list of (int, float)
            For a corpus, a list of such lists.

        """
        if minimum_probability is None:
            minimum_probability = self.minimum_probability
        minimum_probability = max(minimum_probability, 1e-8)  # never allow zero values in sparse output

        # if the input vector is a corpus, return a transformed corpus
        is_corpus, corpus = utils.is_corpus(bow)
        if is_corpus:
            return [self.get_document_topics(doc, minimum_probability) for doc in corpus]

        topic_dist = self.document_topic_distribution(bow)
        return [
            (topicid, float(topicvalue)) for topicid, topicvalue in enumerate(topic_dist)
            if topicvalue >= minimum_probability
        ]

    def __getitem__(self, bow):
        """Get the sparse topic distribution of a bag-of-words document, see :meth:`get_document_topics`."""
        return self.get_document_topics(bow)

    def save(self, fname, ignore=('state',), separately=None, **kwargs):
        """Save the model to file. The topic state is stored beside it, as `<fname>.state`."""
        if self.state is not None:
            self.state.save(utils.smart_extension(fname, '.state'), **kwargs)
        ignore = list({'state'} | set(ignore or ()))
        separately_explicit = ['expElogbeta']
        if separately:
            separately_explicit = list(set(separately_explicit) | set(separately))
        super(LdaModel, self).save(fname, ignore=ignore, separately=separately_explicit, **kwargs)

    @classmethod
    def load(cls, fname, *args, **kwargs):
        """Load a model saved with :meth:`save`, including its topic state. A frozen model stays frozen."""
        result = super(LdaModel, cls).load(fname, *args, **kwargs)
        state_fname = utils.smart_extension(fname, '.state')
        result.state = LdaState.load(state_fname, *args, **kwargs)
        if result.frozen:
            result.freeze()
        return result


def fit(corpus, num_topics, alpha='symmetric', eta='symmetric', config=None, id2word=None):
    """Fit an LDA model on an in-memory bag-of-words corpus.

    Every option is validated before any training work starts. The returned model is frozen.

    Parameters
    ----------
    corpus : {:class:`~topicflow.corpora.BowCorpus`, list of list of (int, int)}
        Training corpus. Empty documents are allowed.
    num_topics : int
        Number of topics `K`, at least 1.
    alpha, eta : {float, sequence of float, str}
        Dirichlet priors, see :class:`LdaModel`.
    config : {:class:`~topicflow.config.TrainingConfig`, dict}, optional
        Training options. Unknown option names are rejected.
    id2word : {dict of (int, str), :class:`~topicflow.corpora.Vocabulary`}, optional
        Term mapping; defaults to the corpus' vocabulary.

    Returns
    -------
    :class:`LdaModel`

    Raises
    ------
    :class:`~topicflow.exceptions.InvalidConfiguration`
        If `num_topics < 1`, the corpus or the vocabulary is empty, a prior is not positive or mis-shaped,
        or a training option is invalid.

    """
    if corpus is None:
        raise InvalidConfiguration("cannot train LDA without a corpus")
    return LdaModel(corpus=corpus, num_topics=num_topics, id2word=id2word, alpha=alpha, eta=eta, config=config)

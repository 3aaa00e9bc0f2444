#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

from topicflow import matutils


class BaseTopicModel(object):
    def print_topic(self, topicno, topn=10):
        """Get a single topic as a formatted string.

        Parameters
        ----------
        topicno : int
            Topic id.
        topn : int
            Number of words from topic that will be used.

        Returns
        -------
        str
            String representation of topic, like '0.340*"cat" + 0.298*"meow" + 0.183*"purr" + ... '.

        """
        return ' + '.join('%.3f*"%s"' % (v, k) for k, v in self.show_topic(topicno, topn))

    def print_topics(self, num_topics=20, num_words=10):
        """Get the most significant topics, formatted, and log them at INFO level.

        Parameters
        ----------
        num_topics : int, optional
            The number of topics to be selected, if -1 - all topics will be in result.
        num_words : int, optional
            The number of words to be included per topics (ordered by significance).

        Returns
        -------
        list of (int, str)
            Sequence with (topic_id, formatted topic).

        """
        return self.show_topics(num_topics=num_topics, num_words=num_words, log=True)

    def get_topics(self):
        """Get the topics X terms matrix, shape (`num_topics`, `vocabulary_size`).

        Raises
        ------
        NotImplementedError

        """
        raise NotImplementedError

    def get_topic_terms(self, topicid, topn=10):
        """Get the `topn` most probable `(term_id, probability)` pairs of a topic, ties by ascending term id."""
        topic = self.get_topics()[topicid]
        bestn = matutils.argsort(topic, topn, reverse=True)
        return [(int(idx), float(topic[idx])) for idx in bestn]

    def show_topic(self, topicid, topn=10):
        """Get the `topn` most probable `(term, probability)` pairs of a topic."""
        return [(self.id2word[idx], value) for idx, value in self.get_topic_terms(topicid, topn)]

    def top_terms(self, topic_index, n=10):
        """Get the `n` most probable terms of topic `topic_index`, highest probability first.

        Terms with equal probability are ordered by ascending vocabulary id.

        """
        return [term for term, _ in self.show_topic(topic_index, n)]

#!/usr/bin/env python
# encoding: utf-8

"""Module contains common utilities used in automated code tests for topicflow modules.

Attributes:
-----------
common_texts : list of list of str
    Toy dataset.

common_vocabulary : :class:`~topicflow.corpora.Vocabulary`
    Vocabulary of toy dataset.

common_corpus : list of list of (int, int)
    Corpus of toy dataset.

cat_car_documents : list of str
    Four raw documents, two about cats and two about cars.

cat_car_texts : list of list of str
    The same documents, already tokenized.


Examples:
---------
It's easy to keep objects in temporary folder and reuse'em if needed:

>>> from topicflow.models import LdaModel, fit
>>> from topicflow.test.utils import get_tmpfile, common_corpus
>>>
>>> model = fit(common_corpus, num_topics=2, config={'random_seed': 0})
>>> temp_path = get_tmpfile('toy_lda')
>>> model.save(temp_path)
>>>
>>> new_model = LdaModel.load(temp_path)

Let's print first document in toy dataset and then recreate it using its corpus and vocabulary.

>>> from topicflow.test.utils import common_texts, common_vocabulary, common_corpus
>>> print(common_texts[0])
['human', 'interface', 'computer']
>>> assert common_vocabulary.doc2bow(common_texts[0]) == common_corpus[0]

"""

import contextlib
import tempfile
import os
import shutil

from topicflow.corpora import Vocabulary


def get_tmpfile(suffix):
    """Get full path to file `suffix` in temporary folder.
    This function doesn't create the file (only generates the name).

    """
    return os.path.join(tempfile.gettempdir(), suffix)


@contextlib.contextmanager
def temporary_file(name=""):
    """This context manager yields the full path of `name` in a fresh temporary directory.
    The directory, with everything in it, is deleted at the end of the context. The file itself is not created.

    Examples
    --------
    >>> import os
    >>> from topicflow.test.utils import temporary_file
    >>> with temporary_file("temp.txt") as tf, open(tf, 'w') as outfile:
    ...     outfile.write("my extremely useful information")
    ...     print("Is this file exists? {}".format(os.path.exists(tf)))
    Is this file exists? True
    >>>
    >>> print("Is this file exists? {}".format(os.path.exists(tf)))
    Is this file exists? False

    """
    tmp = tempfile.mkdtemp()
    try:
        yield os.path.join(tmp, name)
    finally:
        shutil.rmtree(tmp, ignore_errors=True)


# set up vars used in testing ("Deerwester" from the web tutorial)
common_texts = [
    ['human', 'interface', 'computer'],
    ['survey', 'user', 'computer', 'system', 'response', 'time'],
    ['eps', 'user', 'interface', 'system'],
    ['system', 'human', 'system', 'eps'],
    ['user', 'response', 'time'],
    ['trees'],
    ['graph', 'trees'],
    ['graph', 'minors', 'trees'],
    ['graph', 'minors', 'survey']
]

common_vocabulary = Vocabulary(common_texts)
common_corpus = [common_vocabulary.doc2bow(text) for text in common_texts]

cat_car_documents = [
    "The cat says meow, my pet cat purrs and meows.",
    "A pet cat will purr; pet the cat and hear the purr and the meow.",
    "Drive the car down the road, the car engine hums on the road.",
    "The car engine roars, drive the road, drive the car engine.",
]

cat_car_texts = [
    ['cat', 'meow', 'pet', 'cat', 'purr', 'meow'],
    ['pet', 'cat', 'purr', 'pet', 'cat', 'purr', 'meow'],
    ['drive', 'car', 'road', 'car', 'engine', 'road'],
    ['car', 'engine', 'drive', 'road', 'drive', 'car', 'engine'],
]
CAT_TERMS = {'cat', 'meow', 'pet', 'purr'}
CAR_TERMS = {'car', 'engine', 'drive', 'road'}

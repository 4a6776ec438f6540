#!/usr/bin/python3
# -*- coding: utf-8 -*-

import unittest
import io
import os
import tempfile
from contextlib import redirect_stdout, redirect_stderr
from pathlib import Path

import beansort
import sortbeancount

test_journal = """2021-01-03 * "Employer" "Salary"
  Assets:Bank  2500.00 EUR
  Income:Salary
2021-01-01 open Assets:Bank EUR
"""

malformed_journal = """  Assets:Bank  2500.00 EUR
2021-01-01 open Assets:Bank EUR
"""


class TestBackupPath(unittest.TestCase):
    def test_WithExtension(self):
        self.assertEqual(sortbeancount.backupPath("ledgers/my_finances.beancount"), Path("ledgers/my_finances_backup.beancount"))
        self.assertEqual(sortbeancount.backupPath("main.bean"), Path("main_backup.bean"))

    def test_WithoutExtension(self):
        self.assertEqual(sortbeancount.backupPath("finances"), Path("finances_backup.beancount"))


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "finances.beancount")
        self.backup = os.path.join(self.tmpdir.name, "finances_backup.beancount")
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()

    def tearDown(self):
        self.tmpdir.cleanup()

    def writeJournal(self, text):
        with open(self.path, "w", encoding="utf-8") as jf:
            jf.write(text)

    def readFile(self, path):
        with open(path, encoding="utf-8") as jf:
            return jf.read()

    def runMain(self, argv):
        with redirect_stdout(self.stdout), redirect_stderr(self.stderr):
            return sortbeancount.main(argv)

    def test_SortInPlaceWithBackup(self):
        self.writeJournal(test_journal)
        self.assertEqual(self.runMain([self.path]), 0)
        self.assertEqual(self.readFile(self.path), beansort.sortBeancount(test_journal))
        self.assertEqual(self.readFile(self.backup), test_journal)
        self.assertIn("Backup done: %s -> %s" % (self.path, self.backup), self.stdout.getvalue())

    def test_OutFile(self):
        self.writeJournal(test_journal)
        outpath = os.path.join(self.tmpdir.name, "sorted.beancount")
        self.assertEqual(self.runMain(["--no-backup", "-o", outpath, self.path]), 0)
        self.assertEqual(self.readFile(self.path), test_journal)
        self.assertEqual(self.readFile(outpath), beansort.sortBeancount(test_journal))
        self.assertFalse(os.path.exists(self.backup))

    def test_Stdout(self):
        self.writeJournal(test_journal)
        self.assertEqual(self.runMain(["--stdout", "--spaces", self.path]), 0)
        self.assertEqual(self.stdout.getvalue(), beansort.sortBeancount(test_journal, spaces=True))
        self.assertEqual(self.readFile(self.path), test_journal)
        self.assertFalse(os.path.exists(self.backup))

    def test_SkipLines(self):
        self.writeJournal(";; -*- mode: beancount -*-\n" + test_journal)
        self.assertEqual(self.runMain(["-c", "-s", "1", self.path]), 0)
        self.assertTrue(self.stdout.getvalue().startswith(";; -*- mode: beancount -*-\n;;;;;;;;;;;;;;;;\n"))

    def test_MalformedJournalIsNotTouched(self):
        self.writeJournal(malformed_journal)
        self.assertEqual(self.runMain([self.path]), 1)
        self.assertEqual(self.readFile(self.path), malformed_journal)
        self.assertFalse(os.path.exists(self.backup))
        self.assertIn("ERROR:", self.stderr.getvalue())
        self.assertIn("line 1", self.stderr.getvalue())

    def test_MissingFile(self):
        self.assertEqual(self.runMain([self.path]), 1)
        self.assertIn("ERROR: could not read", self.stderr.getvalue())

    def test_NotUtf8(self):
        with open(self.path, "wb") as jf:
            jf.write(b'2021-01-01 open Assets:Cash\n2021-01-02 * "Caf\xe9"\n')
        self.assertEqual(self.runMain(["-n", self.path]), 1)
        self.assertIn("ERROR: could not read", self.stderr.getvalue())
        with open(self.path, "rb") as jf:
            self.assertEqual(jf.read(), b'2021-01-01 open Assets:Cash\n2021-01-02 * "Caf\xe9"\n')

    def test_UsageErrors(self):
        self.assertEqual(self.runMain([]), 2)
        self.assertEqual(self.runMain(["--bogus", self.path]), 2)
        self.assertEqual(self.runMain(["--skipn", "abc", self.path]), 2)
        self.assertEqual(self.runMain(["--skipn", "-3", self.path]), 2)
        self.assertEqual(self.runMain(["a.beancount", "b.beancount"]), 2)

    def test_Help(self):
        self.assertEqual(self.runMain(["--help"]), 0)
        self.assertIn("--spaces", self.stdout.getvalue())


if __name__ == '__main__':
    unittest.main()

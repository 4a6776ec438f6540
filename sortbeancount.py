#!/usr/bin/python3
# -*- coding: utf-8 -*-

import beansort
import os, sys
import getopt
import shutil
from pathlib import Path

from sortconfig import *

def printhelp():
    print("%s [options] <beancount file>" % os.path.basename(sys.argv[0]))
    print("\t-h, --help\t\tShow Help")
    print("\t-o, --out <file>\tWrite sorted journal to <file> instead of overwriting the input")
    print("\t-s, --skipn <n>\t\tLeave the first n lines where they are (e.g. for a modline)")
    print("\t-e, --spaces\t\tLeave one empty line between each entry")
    print("\t-n, --no-backup\t\tDo not create <name>%s.<ext> before writing" % backup_suffix_)
    print("\t-c, --stdout\t\tPrint sorted journal to StdOut")

def backupPath(path):
    """
        my_finances.beancount -> my_finances_backup.beancount
    """
    p = Path(path)
    ext = p.suffix[1:] if len(p.suffix) > 1 else default_extension_
    return p.with_name("%s%s.%s" % (p.stem, backup_suffix_, ext))

def backupFile(path):
    path_backup = backupPath(path)
    shutil.copy(path, path_backup)
    print("Backup done: %s -> %s" % (path, path_backup))
    return path_backup

def main(argv):
    try:
        opts, args = getopt.getopt(argv, "ho:s:enc", ["help", "out=", "skipn=", "spaces", "no-backup", "stdout"])
    except getopt.GetoptError as err:
        print(err, file=sys.stderr)  # will print something like "option -a not recognized"
        printhelp()
        return 2
    outpath = None
    skip_lines = default_skip_lines_
    spaces = default_spaces_
    backup = backup_by_default_
    to_stdout = False
    for opt_o, opt_a in opts:
        if opt_o in ("-h", "--help"):
            printhelp()
            return 0
        elif opt_o in ("-o", "--out"):
            outpath = opt_a
        elif opt_o in ("-s", "--skipn"):
            try:
                skip_lines = int(opt_a)
            except ValueError:
                skip_lines = -1
            if skip_lines < 0:
                print("ERROR: --skipn needs a non-negative number, got \"%s\"" % opt_a, file=sys.stderr)
                return 2
        elif opt_o in ("-e", "--spaces"):
            spaces = True
        elif opt_o in ("-n", "--no-backup"):
            backup = False
        elif opt_o in ("-c", "--stdout"):
            to_stdout = True
        else:
            assert False, "unhandled option"

    #exactly one journal file
    if len(args) != 1:
        printhelp()
        return 2
    path = args[0]
    if outpath is None:
        outpath = path

    try:
        with open(path, encoding=journal_encoding_) as jf:
            text = jf.read()
    except (OSError, UnicodeDecodeError) as e:
        print("ERROR: could not read %s: %s" % (path, e), file=sys.stderr)
        return 1

    ## nothing gets written unless the whole journal could be sorted
    try:
        sorted_text = beansort.sortBeancount(text, skip_lines=skip_lines, spaces=spaces)
    except beansort.BeanSortError as e:
        print("ERROR: %s: %s" % (path, e), file=sys.stderr)
        return 1

    if to_stdout:
        sys.stdout.write(sorted_text)
        return 0

    print("Selected beancount file is %s" % path)
    try:
        if backup:
            backupFile(path)
        with open(outpath, "w", encoding=journal_encoding_) as of:
            of.write(sorted_text)
    except OSError as e:
        print("ERROR: could not write %s: %s" % (outpath, e), file=sys.stderr)
        return 1
    print("Sorted journal written to %s" % outpath)
    return 0

def run():
    sys.exit(main(sys.argv[1:]))

if __name__ == '__main__':
    run()

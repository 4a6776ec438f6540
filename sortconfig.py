#!/usr/bin/python3
# -*- coding: utf-8 -*-

#
# configuration for sortbeancount.py
#

journal_encoding_ = "utf-8"

# leave the first n lines where they are, e.g. for an emacs modeline
default_skip_lines_ = 0

# one empty line between each entry
default_spaces_ = False

########### Backup Config ###################

# my_finances.beancount -> my_finances_backup.beancount
backup_by_default_ = True
backup_suffix_ = "_backup"
# used if the journal file has no extension
default_extension_ = "beancount"

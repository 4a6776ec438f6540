#!/usr/bin/python3
# -*- coding: utf-8 -*-
# (c) Bernhard Tittelbach, 2015-2017, AGPLv3

import datetime
import re
from collections import namedtuple, defaultdict

class BeanSortError(Exception):
    pass

class MalformedInput(BeanSortError):
    def __init__(self, message, lineno=None, line=None):
        self.lineno = lineno
        self.line = line
        if lineno is not None:
            message = "line %d: %s: \"%s\"" % (lineno, message, line)
        super().__init__(message)

class InvalidDate(BeanSortError):
    pass

class UnclassifiableDirective(BeanSortError):
    pass


### sections in the order they are written out
section_order_ = ("Accounts", "Options", "Commodities", "OtherEntries", "Prices", "Transactions")
section_labels_ = {
    "Accounts":"Accounts",
    "Options":"Options",
    "Commodities":"Commodities",
    "OtherEntries":"Other Entries",
    "Prices":"Prices",
    "Transactions":"Transactions",
    }

banner_symbol_ = ";"
banner_deco_width_ = 4  # number of banner_symbol_ on each side of the label

### directive keyword -> section, everything not listed here is an OtherEntries
keyword_sections_ = {
    "open":"Accounts",
    "option":"Options",
    "commodity":"Commodities",
    "price":"Prices",
    }
transaction_flags_ = frozenset(["*", "!", "txn"])
undated_keywords_ = ("option", "plugin", "include", "pushtag", "poptag", "pushmeta", "popmeta")

LINE_HEADER = "header"
LINE_COMMENT = "comment"
LINE_BLANK = "blank"
LINE_CONTINUATION = "continuation"

re_dated_header = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?=\s|$)(?:\s+([*!]|[^\s\"]+))?")
re_undated_header = re.compile(r"^(" + "|".join(undated_keywords_) + r")(?=\s|$)")
## org-mode headings are ignored by beancount just like comments
re_toplevel_comment = re.compile(r"^[;*]")
re_blank = re.compile(r"^\s*$")

## lines: tuple of all lines incl. leading comments, header: the directive line
Entry = namedtuple("Entry", ["lines", "header", "category", "date"])
## preamble: lines kept verbatim on top, trailer: comments after the last directive
Document = namedtuple("Document", ["preamble", "entries", "trailer"])


def classifyLine(line):
    if not re_dated_header.match(line) is None or not re_undated_header.match(line) is None:
        return LINE_HEADER
    if not re_toplevel_comment.match(line) is None:
        return LINE_COMMENT
    if not re_blank.match(line) is None:
        return LINE_BLANK
    return LINE_CONTINUATION

def categoryOf(header):
    m = re_dated_header.match(header)
    if not m is None:
        keyword = m.group(4)
    else:
        m = re_undated_header.match(header)
        if m is None:
            raise UnclassifiableDirective("not a directive: \"%s\"" % header)
        keyword = m.group(1)
    if keyword in keyword_sections_:
        return keyword_sections_[keyword]
    if keyword in transaction_flags_:
        return "Transactions"
    return "OtherEntries"

def dateKeyOf(header):
    """ @return datetime.date or None for undated directives like option """
    m = re_dated_header.match(header)
    if m is None:
        return None
    try:
        return datetime.date(*map(int, m.group(1,2,3)))
    except ValueError:
        raise InvalidDate("invalid date %s-%s-%s in \"%s\"" % (m.group(1,2,3) + (header,))) from None

def makeEntry(lines, header_index):
    header = lines[header_index]
    return Entry(tuple(lines), header, categoryOf(header), dateKeyOf(header))

def splitLines(text):
    lines = [l.rstrip("\r") for l in text.split("\n")]
    if lines[-1] == "":
        lines.pop()
    return lines

def parseEntries(lines, first_lineno=1):
    """
        Group lines into Entries in one pass.
        Comments in column 0 belong to the next directive, indented lines
        and blank lines to the previous one.
        @return (list of Entry, list of trailing lines after the last directive)
    """
    entries = []
    current = None          # lines of the entry being collected
    header_index = 0
    header_lineno = 0
    pending = []            # column-0 comments waiting for their directive
    pending_lineno = 0
    skip = 0
    for i, line in enumerate(lines):
        n = i + first_lineno
        if skip > 0:
            skip -= 1
            continue
        if not bannerSectionAt(lines, i) is None:
            ## banner written by an earlier run
            skip = 2
            continue
        kind = classifyLine(line)
        if kind == LINE_HEADER:
            if not current is None:
                entries.append(closeEntry(current, header_index, header_lineno))
            current = pending + [line]
            header_index = len(pending)
            header_lineno = n
            pending = []
        elif kind == LINE_COMMENT:
            if len(pending) == 0:
                pending_lineno = n
            pending.append(line)
        elif kind == LINE_BLANK:
            if len(pending) > 0:
                pending.append(line)
            elif not current is None:
                current.append(line)
            ## else: blank line before the first directive, dropped
        else:
            if current is None:
                raise MalformedInput("continuation line without a preceding directive", n, line)
            current += pending
            current.append(line)
            pending = []
    if not current is None:
        entries.append(closeEntry(current, header_index, header_lineno))
    elif len(pending) > 0:
        raise MalformedInput("comment without any directive", pending_lineno, pending[0])
    return entries, pending

def closeEntry(lines, header_index, lineno):
    try:
        return makeEntry(lines, header_index)
    except InvalidDate as e:
        raise InvalidDate("line %d: %s" % (lineno, e)) from e

def parseDocument(text, skip_lines=0):
    if skip_lines < 0:
        raise ValueError("skip_lines must not be negative")
    lines = splitLines(text)
    if skip_lines > len(lines):
        raise MalformedInput("skipped %d lines but there are only %d" % (skip_lines, len(lines)))
    entries, trailer = parseEntries(lines[skip_lines:], skip_lines + 1)
    return Document(tuple(lines[:skip_lines]), tuple(entries), tuple(trailer))

### sorts Entries by date but also keeps original order for entries with the same date.
### undated entries go first
def sortEntriesByDate(entries):
    return [ e for k,n,e in sorted([((not e.date is None, e.date or datetime.date.min),num,e) for e,num in zip(entries,range(0,len(entries)))])]

def groupByCategory(entries):
    groups = defaultdict(list)
    for e in entries:
        groups[e.category].append(e)
    return dict((section, groups[section]) for section in section_order_)

def arrangeDocument(document):
    """ @return list of (section, sorted entries), empty sections left out """
    groups = groupByCategory(document.entries)
    return [(section, sortEntriesByDate(groups[section])) for section in section_order_ if len(groups[section]) > 0]

## e.g. Prices:
## ;;;;;;;;;;;;;;
## ;;;;Prices;;;;
## ;;;;;;;;;;;;;;
def sectionBanner(section):
    label = section_labels_[section]
    deco = banner_symbol_ * banner_deco_width_
    rule = banner_symbol_ * (len(label) + 2 * banner_deco_width_)
    return [rule, deco + label + deco, rule]

def bannerSectionAt(lines, i):
    """
        @return section if lines[i:i+3] is exactly the banner sectionBanner() writes, else None.
        Single rule or label lines are ordinary comments.
    """
    if not lines[i].startswith(banner_symbol_ * banner_deco_width_):
        return None
    for section in section_order_:
        if lines[i:i+3] == sectionBanner(section):
            return section
    return None

def entryLines(entry, spaces=False):
    lines = list(entry.lines)
    if spaces:
        while len(lines) > 1 and not re_blank.match(lines[-1]) is None:
            lines.pop()
        lines.append("")
    return lines

def renderDocument(document, spaces=False):
    out = list(document.preamble)
    for section, entries in arrangeDocument(document):
        out += sectionBanner(section)
        for e in entries:
            out += entryLines(e, spaces)
    out += document.trailer
    if len(out) == 0:
        return ""
    return "\n".join(out) + "\n"

def sortBeancount(text, skip_lines=0, spaces=False):
    return renderDocument(parseDocument(text, skip_lines), spaces)

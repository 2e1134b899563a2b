from factories import make_course, make_instructor, make_meeting
from scheduleboard.services.stacked_course_detector import find_stacked_pairs, get_stacked_info, is_stacked_version


def test_finds_pair_keyed_by_base_course():
    cscd527 = make_course("22222", number="527", current=8, maximum=10)
    cscd427 = make_course("11111", number="427", current=25, maximum=30)

    pairs = find_stacked_pairs([cscd527, cscd427])

    assert list(pairs) == ["11111"]
    info = pairs["11111"]
    assert info.base_course is cscd427
    assert info.stacked_course is cscd527
    assert (info.base_level, info.stacked_level) == (4, 5)
    assert info.enrollment_diff == -17
    assert info.capacity_diff == -20
    assert info.same_instructor and info.same_time and info.same_room


def test_same_room_is_reported_not_required():
    cscd427 = make_course("1", number="427", meetings=[make_meeting(room="101")])
    cscd527 = make_course("2", number="527", meetings=[make_meeting(room="202")])

    pairs = find_stacked_pairs([cscd427, cscd527])

    assert pairs["1"].same_room is False


def test_different_instructors_or_times_are_not_paired():
    cscd427 = make_course("1", number="427")
    other_instructor = make_course("2", number="527", instructor=make_instructor(email="jones@ewu.edu"))
    other_time = make_course("3", number="527", meetings=[make_meeting(start=600, end=650)])

    assert find_stacked_pairs([cscd427, other_instructor]) == {}
    assert find_stacked_pairs([cscd427, other_time]) == {}


def test_first_pairing_wins_for_a_base_course():
    base = make_course("1", number="427")
    first = make_course("2", number="527")
    second = make_course("3", number="527")

    pairs = find_stacked_pairs([base, first, second])

    assert len(pairs) == 1
    assert pairs["1"].stacked_course is first


def test_stacked_version_is_the_higher_level():
    cscd427 = make_course("11111", number="427")
    cscd527 = make_course("22222", number="527")
    pairs = find_stacked_pairs([cscd427, cscd527])

    assert not is_stacked_version(cscd427, pairs)
    assert is_stacked_version(cscd527, pairs)
    assert get_stacked_info(cscd427, pairs) is pairs["11111"]
    assert get_stacked_info(cscd527, pairs) is None


def test_every_course_is_shown_or_badged():
    other = make_instructor(email="jones@ewu.edu")
    courses = [
        make_course("11111", number="427"),
        make_course("22222", number="527"),
        make_course("33333", number="300", instructor=other),
        make_course("44444", subject="CYBR", number="445"),
        make_course("55555", subject="CYBR", number="545"),
    ]
    pairs = find_stacked_pairs(courses)

    hidden = [course for course in courses if is_stacked_version(course, pairs)]
    shown = [course for course in courses if not is_stacked_version(course, pairs)]

    assert [course.crn for course in hidden] == ["22222", "55555"]
    assert len(shown) == 3

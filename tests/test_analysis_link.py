from sonarstep.services.analysis_link import add_build_info, extract_sonar_url


def test_extract_url_from_runner_output():
    log = "INFO: ANALYSIS SUCCESSFUL, you can browse http://sonar:9000/dashboard/index/demo\nINFO: done\n"
    assert extract_sonar_url(log) == "http://sonar:9000/dashboard/index/demo"


def test_extract_url_from_newer_scanner_output():
    log = "INFO: ANALYSIS SUCCESSFUL, you can find the results at: http://sonar:9000/dashboard?id=demo\n"
    assert extract_sonar_url(log) == "http://sonar:9000/dashboard?id=demo"


def test_last_url_wins():
    log = (
        "ANALYSIS SUCCESSFUL, you can browse http://sonar/one\n"
        "ANALYSIS SUCCESSFUL, you can browse http://sonar/two\n"
    )
    assert extract_sonar_url(log) == "http://sonar/two"


def test_no_url_in_log():
    assert extract_sonar_url("EXECUTION FAILURE\n") is None
    assert extract_sonar_url("") is None


def test_add_build_info_reads_listener_log(listener):
    listener.write("ANALYSIS SUCCESSFUL, you can browse http://sonar/dashboard")
    info = add_build_info(listener, "default")
    assert info.installation_name == "default"
    assert info.url == "http://sonar/dashboard"
